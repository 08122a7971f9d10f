"""
Pytest configuration and fixtures for rpc-compare tests.
"""

import asyncio
import base64
import logging
from typing import Any, Dict, List, Optional

import pytest

from rpc_compare.archive.export import ExportArchive
from rpc_compare.client.api_info import ApiInfo
from rpc_compare.client.transport import RpcClient
from rpc_compare.models.core import RpcRequest


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop log handlers bound to a finished test's captured stderr."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.WARNING)


def cid(value: str) -> Dict[str, str]:
    return {"/": value}


def make_block(height: int, parents: List[str], messages_meta: str, miner: str = "t01000",
               ticket: bytes = b"\x01") -> Dict[str, Any]:
    return {
        "Miner": miner,
        "Ticket": {"VRFProof": base64.b64encode(ticket).decode("ascii")},
        "Parents": [cid(parent) for parent in parents],
        "ParentWeight": str(height * 10),
        "Height": height,
        "ParentStateRoot": cid(f"state-{height}"),
        "ParentMessageReceipts": cid(f"receipts-{height}"),
        "Messages": cid(messages_meta),
        "Timestamp": 1700000000 + height * 30,
    }


def make_message(sender: str, nonce: int, params: Optional[str] = None) -> Dict[str, Any]:
    return {
        "Version": 0,
        "To": "t01001",
        "From": sender,
        "Nonce": nonce,
        "Value": "1000",
        "GasLimit": 1000000,
        "GasFeeCap": "100",
        "GasPremium": "10",
        "Method": 2 if params else 0,
        "Params": params,
    }


@pytest.fixture
def chain_export() -> Dict[str, Any]:
    """Three tipsets (heights 10, 9, 8); the parent of height 8 is outside the export.

    ``msg-a`` is included at heights 10 and 9, ``smsg-b`` at heights 10 and 8,
    ``msg-c`` only at height 8.
    """
    return {
        "head": [cid("blk-10")],
        "tipsets": [
            {"Cids": [cid("blk-10")], "Blocks": [make_block(10, ["blk-9"], "meta-10")], "Height": 10},
            {"Cids": [cid("blk-9")], "Blocks": [make_block(9, ["blk-8"], "meta-9")], "Height": 9},
            {"Cids": [cid("blk-8")], "Blocks": [make_block(8, ["blk-7"], "meta-8", miner="t01002")], "Height": 8},
        ],
        "block_messages": {
            "meta-10": {"BlsMessages": [cid("msg-a")], "SecpkMessages": [cid("smsg-b")]},
            "meta-9": {"BlsMessages": [cid("msg-a")], "SecpkMessages": []},
            "meta-8": {"BlsMessages": [cid("msg-c")], "SecpkMessages": [cid("smsg-b")]},
        },
        "messages": {
            "msg-a": make_message("t3aaaa", 1),
            "msg-c": make_message("t3cccc", 2),
        },
        "signed_messages": {
            "smsg-b": {
                "Message": make_message("t1bbbb", 7, params="AAE="),
                "Signature": {"Type": 1, "Data": "AAAA"},
            },
        },
        "market_deals": {
            "state-10": [7, 3, 1, 2, 6, 5, 4],
            "state-9": [],
            "state-8": [11],
        },
    }


@pytest.fixture
def export_archive(chain_export: Dict[str, Any]) -> ExportArchive:
    """An archive loaded from ``chain_export``."""
    archive = ExportArchive()
    archive.load_export(chain_export)
    return archive


class FakeRpcClient(RpcClient):
    """In-memory client answering from a method-name table.

    A table value that is an exception is raised instead of returned.
    Methods missing from the table answer ``"ok"``.
    """

    def __init__(self, responses: Optional[Dict[str, Any]] = None, delay: float = 0.0):
        super().__init__(ApiInfo.from_str("/ip4/127.0.0.1/tcp/1234/http"))
        self.responses = responses or {}
        self.delay = delay
        self.calls: List[RpcRequest] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    async def call(self, request: RpcRequest) -> Any:
        self.calls.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            response = self.responses.get(request.method_name, "ok")
            if isinstance(response, Exception):
                raise response
            return response
        finally:
            self.in_flight -= 1

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_client_factory():
    """Build ``FakeRpcClient`` instances."""
    return FakeRpcClient
