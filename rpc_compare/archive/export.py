"""
File-backed chain archive.

Reads chain exports in JSON or YAML. An export is a mapping with these keys,
all values in Lotus JSON form::

    head:            optional tipset key of the chain head
    tipsets:         list of tipsets ({"Cids", "Blocks", "Height"})
    block_messages:  {<block Messages CID>: {"BlsMessages": [CID...],
                                             "SecpkMessages": [CID...]}}
    messages:        {<CID>: unsigned message}
    signed_messages: {<CID>: signed message}
    market_deals:    {<parent state root CID>: [deal id...]}

Several exports can be loaded together; their contents are merged.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml
from pydantic import ValidationError

from ..models.chain import BlockHeader, Cid, Message, SignedMessage, Tipset, TipsetKey
from ..models.errors import ArchiveError
from ..utils.logging import get_logger
from .base import ChainArchive


logger = get_logger(__name__)

SUPPORTED_SUFFIXES = (".json", ".yaml", ".yml")

KeyTuple = Tuple[str, ...]


def _key_tuple(key: Iterable[Cid]) -> KeyTuple:
    return tuple(cid.value for cid in key)


def _cid_string(value: Any) -> str:
    if isinstance(value, dict):
        return str(value.get("/", ""))
    return str(value)


class ExportArchive(ChainArchive):
    """In-memory archive built from one or more chain export files."""

    def __init__(self):
        self._tipsets: Dict[KeyTuple, Tipset] = {}
        self._heads: List[KeyTuple] = []
        self._block_messages: Dict[str, Dict[str, List[str]]] = {}
        self._messages: Dict[str, Message] = {}
        self._signed_messages: Dict[str, SignedMessage] = {}
        self._market_deals: Dict[str, List[int]] = {}

    @classmethod
    def from_paths(cls, paths: Iterable[Path]) -> "ExportArchive":
        """Load and merge the exports at ``paths``.

        Raises:
            ArchiveError: If a file is missing, unreadable or malformed
        """
        archive = cls()
        for path in paths:
            archive.load_file(Path(path))
        return archive

    def load_file(self, path: Path) -> None:
        suffix = path.suffix.lower()
        if suffix not in SUPPORTED_SUFFIXES:
            raise ArchiveError(
                f"unsupported archive format {suffix!r} for {path}; expected one of {', '.join(SUPPORTED_SUFFIXES)}",
                path=str(path),
            )

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f) if suffix == ".json" else yaml.safe_load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ArchiveError(f"cannot read archive {path}: {e}", path=str(path)) from e

        if not isinstance(data, dict):
            raise ArchiveError(f"archive {path} must contain a mapping", path=str(path))

        try:
            self.load_export(data)
        except (ValidationError, ValueError, TypeError, AttributeError) as e:
            raise ArchiveError(f"malformed archive {path}: {e}", path=str(path)) from e

        logger.info("Loaded chain archive", path=str(path), tipsets=len(self._tipsets))

    def load_export(self, data: Dict[str, Any]) -> None:
        """Merge one decoded export into the archive."""
        for raw in data.get("tipsets") or []:
            tipset = Tipset.model_validate(raw)
            self._tipsets[_key_tuple(tipset.key)] = tipset

        if data.get("head"):
            self._heads.append(tuple(_cid_string(cid) for cid in data["head"]))

        for meta_cid, entry in (data.get("block_messages") or {}).items():
            self._block_messages[meta_cid] = {
                "bls": [_cid_string(cid) for cid in entry.get("BlsMessages") or []],
                "secp": [_cid_string(cid) for cid in entry.get("SecpkMessages") or []],
            }

        for cid, raw in (data.get("messages") or {}).items():
            self._messages[cid] = Message.model_validate({**raw, "CID": {"/": cid}})

        for cid, raw in (data.get("signed_messages") or {}).items():
            self._signed_messages[cid] = SignedMessage.model_validate({**raw, "CID": {"/": cid}})

        for state_root, deal_ids in (data.get("market_deals") or {}).items():
            self._market_deals[state_root] = [int(deal_id) for deal_id in deal_ids]

    def heaviest_tipset(self) -> Tipset:
        if self._heads:
            candidates = []
            for head in self._heads:
                if head not in self._tipsets:
                    raise ArchiveError(f"head tipset {list(head)} is not in the archive")
                candidates.append(self._tipsets[head])
        else:
            candidates = list(self._tipsets.values())

        if not candidates:
            raise ArchiveError("archive contains no tipsets")
        return max(candidates, key=lambda tipset: (tipset.weight, tipset.epoch))

    def load_tipset(self, key: TipsetKey) -> Optional[Tipset]:
        return self._tipsets.get(_key_tuple(key))

    def block_messages(self, block: BlockHeader) -> Tuple[List[Message], List[SignedMessage]]:
        entry = self._block_messages.get(block.messages.value)
        if entry is None:
            raise ArchiveError(
                f"messages of block at height {block.height} (meta {block.messages}) are not in the archive"
            )

        try:
            bls = [self._messages[cid] for cid in entry["bls"]]
            secp = [self._signed_messages[cid] for cid in entry["secp"]]
        except KeyError as e:
            raise ArchiveError(f"message {e.args[0]} is not in the archive") from e
        return bls, secp

    def market_deal_ids(self, tipset: Tipset) -> List[int]:
        state_root = tipset.parent_state.value
        if state_root not in self._market_deals:
            raise ArchiveError(f"Market actor not found in state {state_root}", height=tipset.epoch)
        return sorted(self._market_deals[state_root])

    def __len__(self) -> int:
        return len(self._tipsets)
