"""
Unit tests for the file-backed chain archive.
"""

import json

import pytest
import yaml

from rpc_compare.archive.export import ExportArchive
from rpc_compare.models.chain import Cid
from rpc_compare.models.errors import ArchiveError


class TestLoading:
    """Test reading exports from disk."""

    def test_load_json(self, tmp_path, chain_export):
        """JSON exports are loaded."""
        path = tmp_path / "export.json"
        path.write_text(json.dumps(chain_export), encoding="utf-8")

        archive = ExportArchive.from_paths([path])

        assert len(archive) == 3
        assert archive.heaviest_tipset().epoch == 10

    def test_load_yaml(self, tmp_path, chain_export):
        """YAML exports are loaded."""
        path = tmp_path / "export.yaml"
        path.write_text(yaml.safe_dump(chain_export), encoding="utf-8")

        archive = ExportArchive.from_paths([path])

        assert len(archive) == 3

    def test_merge_several_files(self, tmp_path, chain_export):
        """Contents of several exports are merged."""
        first = dict(chain_export, tipsets=chain_export["tipsets"][:1])
        second = dict(chain_export, tipsets=chain_export["tipsets"][1:], head=None)
        (tmp_path / "a.json").write_text(json.dumps(first), encoding="utf-8")
        (tmp_path / "b.json").write_text(json.dumps(second), encoding="utf-8")

        archive = ExportArchive.from_paths([tmp_path / "a.json", tmp_path / "b.json"])

        assert len(archive) == 3

    def test_unsupported_suffix(self, tmp_path):
        """Only JSON and YAML exports are understood."""
        path = tmp_path / "snapshot.car"
        path.write_bytes(b"\x00")

        with pytest.raises(ArchiveError):
            ExportArchive.from_paths([path])

    def test_missing_file(self, tmp_path):
        with pytest.raises(ArchiveError):
            ExportArchive.from_paths([tmp_path / "missing.json"])

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ArchiveError):
            ExportArchive.from_paths([path])

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[]", encoding="utf-8")

        with pytest.raises(ArchiveError):
            ExportArchive.from_paths([path])

    def test_malformed_tipset(self, tmp_path):
        """Tipsets that do not match the Lotus JSON shape are rejected."""
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"tipsets": [{"Cids": [], "Blocks": [], "Height": 1}]}), encoding="utf-8")

        with pytest.raises(ArchiveError):
            ExportArchive.from_paths([path])


class TestQueries:
    """Test archive reads."""

    def test_heaviest_without_head(self, chain_export):
        """Without a declared head the heaviest tipset wins."""
        chain_export.pop("head")
        archive = ExportArchive()
        archive.load_export(chain_export)

        assert archive.heaviest_tipset().epoch == 10

    def test_head_not_in_archive(self, chain_export):
        chain_export["head"] = [{"/": "unknown"}]
        archive = ExportArchive()
        archive.load_export(chain_export)

        with pytest.raises(ArchiveError):
            archive.heaviest_tipset()

    def test_chain_walk(self, export_archive):
        """The walk includes its start and follows parents."""
        root = export_archive.heaviest_tipset()

        assert [tipset.epoch for tipset in export_archive.chain(root, 2)] == [10, 9]
        assert [tipset.epoch for tipset in export_archive.chain(root, 10)] == [10, 9, 8]
        assert list(export_archive.chain(root, 0)) == []

    def test_load_tipset(self, export_archive):
        tipset = export_archive.load_tipset([Cid.model_validate({"/": "blk-9"})])

        assert tipset is not None
        assert tipset.epoch == 9
        assert export_archive.load_tipset([Cid.model_validate({"/": "nope"})]) is None

    def test_block_messages(self, export_archive):
        """Messages are split by signature scheme and carry their CID."""
        root = export_archive.heaviest_tipset()

        bls, secp = export_archive.block_messages(root.blocks[0])

        assert [message.cid.value for message in bls] == ["msg-a"]
        assert [message.cid.value for message in secp] == ["smsg-b"]
        assert secp[0].message.from_ == "t1bbbb"

    def test_block_messages_missing_meta(self, chain_export):
        del chain_export["block_messages"]["meta-10"]
        archive = ExportArchive()
        archive.load_export(chain_export)

        with pytest.raises(ArchiveError):
            archive.block_messages(archive.heaviest_tipset().blocks[0])

    def test_market_deal_ids_sorted(self, export_archive):
        root = export_archive.heaviest_tipset()

        assert export_archive.market_deal_ids(root) == [1, 2, 3, 4, 5, 6, 7]

    def test_market_actor_missing(self, chain_export):
        chain_export["market_deals"] = {}
        archive = ExportArchive()
        archive.load_export(chain_export)

        with pytest.raises(ArchiveError) as exc_info:
            archive.market_deal_ids(archive.heaviest_tipset())

        assert "Market actor not found" in exc_info.value.message
