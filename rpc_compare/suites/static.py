"""
Hand-curated test suites that need no chain archive.

Every builder is pure: it returns a new list built from literal fixtures.
"""

from typing import List

from ..cases import RpcTest
from ..client import methods
from .fixtures import BEACON_ROUND, ETH_FUNDED_ADDRESS, load_fixtures


# Heads of two nodes following the same chain may be a few epochs apart
HEAD_EPOCH_TOLERANCE = 10


def parse_hex(value: str) -> int:
    try:
        return int(value[2:] if value.startswith("0x") else value, 16)
    except ValueError:
        return 0


def common_tests() -> List[RpcTest]:
    return [
        RpcTest.basic(methods.version()),
        RpcTest.basic(methods.start_time()),
        RpcTest.basic(methods.discover()).ignore("Not implemented yet"),
        RpcTest.basic(methods.session()),
    ]


def beacon_tests() -> List[RpcTest]:
    return [RpcTest.identity(methods.beacon_get_entry(BEACON_ROUND))]


def chain_tests() -> List[RpcTest]:
    return [
        RpcTest.validate(
            methods.chain_head(),
            lambda sut, reference: abs(sut.epoch - reference.epoch) < HEAD_EPOCH_TOLERANCE,
        ),
        RpcTest.identity(methods.chain_get_genesis()),
    ]


def mpool_tests() -> List[RpcTest]:
    return [RpcTest.basic(methods.mpool_pending([]))]


def net_tests() -> List[RpcTest]:
    fixtures = load_fixtures()
    return [
        RpcTest.basic(methods.net_addrs_listen()),
        RpcTest.basic(methods.net_peers()),
        RpcTest.identity(methods.net_listening()),
        RpcTest.basic(methods.net_agent_version(fixtures.peer_id)),
        RpcTest.basic(methods.net_info()).ignore("Not implemented in Lotus"),
        RpcTest.basic(methods.net_auto_nat_status()),
        RpcTest.identity(methods.net_version()),
    ]


def node_tests() -> List[RpcTest]:
    return [RpcTest.basic(methods.node_status()).ignore("Only served by the v1 API")]


def wallet_tests() -> List[RpcTest]:
    fixtures = load_fixtures()
    return [
        RpcTest.identity(methods.wallet_balance(fixtures.known_wallet)),
        RpcTest.identity(methods.wallet_validate_address(fixtures.known_wallet)),
        RpcTest.identity(methods.wallet_verify(
            fixtures.known_wallet,
            fixtures.signed_text_b64,
            fixtures.signature_json(),
        )),
    ]


def eth_tests() -> List[RpcTest]:
    return [
        RpcTest.identity(methods.eth_accounts()),
        RpcTest.validate(
            methods.eth_block_number(),
            lambda sut, reference: abs(parse_hex(sut) - parse_hex(reference)) < HEAD_EPOCH_TOLERANCE,
        ),
        RpcTest.identity(methods.eth_chain_id()),
        # Gas price carries randomness
        RpcTest.basic(methods.eth_gas_price()),
        RpcTest.basic(methods.eth_syncing()),
        RpcTest.identity(methods.eth_get_balance(ETH_FUNDED_ADDRESS, "latest")),
        RpcTest.identity(methods.eth_get_balance(ETH_FUNDED_ADDRESS, "pending")),
    ]


def websocket_tests() -> List[RpcTest]:
    return [RpcTest.identity(methods.chain_notify()).ignore("Not implemented yet")]


def static_tests() -> List[RpcTest]:
    """All transport-independent static suites, in a fixed order."""
    tests: List[RpcTest] = []
    for builder in (
        common_tests,
        beacon_tests,
        chain_tests,
        mpool_tests,
        net_tests,
        node_tests,
        wallet_tests,
        eth_tests,
    ):
        tests.extend(builder())
    return tests
