"""
Tests derived from chain data.

The generator starts at the archive's heaviest tipset and walks back through
``n_tipsets`` tipsets, turning the blocks, messages, miners and deals it
finds into RPC tests with realistic parameters. Message-scoped tests are
emitted once per distinct message CID; block, miner and tipset tests are
emitted for every occurrence.
"""

import base64
from typing import List, Set, Union

from ..archive.base import ChainArchive
from ..cases import RpcTest
from ..client import methods
from ..models.chain import Cid, Message, SignedMessage, Tipset, TipsetKey
from ..models.errors import ArchiveError, GenerationError
from ..utils.logging import get_logger
from .fixtures import (
    DATACAP_TOKEN_ACTOR_ID,
    ETH_FUNDED_ADDRESS,
    ETH_MASKED_ID_ADDRESS,
    MULTISIG_ACTOR_ID,
    SYSTEM_ACTOR_ID,
    UNKNOWN_ACTOR_ID,
    VERIFIED_REGISTRY_ACTOR_ID,
    id_address,
)


logger = get_logger(__name__)

MESSAGE_WAIT_TIMEOUT_SECONDS = 30.0
SEARCH_MESSAGE_LOOKBACK = 800
DEALS_PER_TIPSET = 5
SECTOR_NUMBER = 101
RANDOMNESS_ENTROPY = base64.b64encode(b"dead beef").decode("ascii")


def _without_return_dec(lookup):
    if lookup is None:
        return None
    return lookup.model_copy(update={"return_dec": None})


def validate_message_lookup(request) -> RpcTest:
    # Nodes decode message return values differently; compare everything else
    return RpcTest.validate(
        request,
        lambda sut, reference: _without_return_dec(sut) == _without_return_dec(reference),
    )


def chain_tests_with_tipset(tipset: Tipset) -> List[RpcTest]:
    block_cid, _ = tipset.min_ticket_block()
    return [
        RpcTest.identity(methods.chain_get_block(block_cid)),
        RpcTest.identity(methods.chain_get_tipset_by_height(tipset.epoch)),
        RpcTest.identity(methods.chain_get_tipset_after_height(tipset.epoch)),
        RpcTest.identity(methods.chain_get_tipset(tipset.key)),
        RpcTest.identity(methods.chain_read_obj(block_cid)),
        RpcTest.identity(methods.chain_has_obj(block_cid)),
        RpcTest.identity(methods.chain_get_path(tipset.key, tipset.parents)),
    ]


def state_tests_with_tipset(tipset: Tipset) -> List[RpcTest]:
    _, block = tipset.min_ticket_block()
    key = tipset.key
    system_actor = id_address(SYSTEM_ACTOR_ID)
    multisig = id_address(MULTISIG_ACTOR_ID)
    return [
        RpcTest.identity(methods.state_network_name()),
        RpcTest.identity(methods.state_get_actor(system_actor, key)),
        RpcTest.identity(methods.state_get_randomness_from_tickets(
            key, methods.ELECTION_PROOF_PRODUCTION, tipset.epoch, RANDOMNESS_ENTROPY
        )),
        RpcTest.identity(methods.state_get_randomness_from_beacon(
            key, methods.ELECTION_PROOF_PRODUCTION, tipset.epoch, RANDOMNESS_ENTROPY
        )),
        RpcTest.identity(methods.state_read_state(system_actor, key)),
        RpcTest.identity(methods.state_read_state(system_actor, None)),
        RpcTest.identity(methods.state_miner_active_sectors(block.miner, key)),
        RpcTest.identity(methods.state_lookup_id(block.miner, key)),
        # Unknown ids resolve to themselves
        RpcTest.identity(methods.state_lookup_id(id_address(UNKNOWN_ACTOR_ID), key)),
        RpcTest.identity(methods.state_network_version(key)),
        RpcTest.identity(methods.state_list_miners(key)),
        RpcTest.identity(methods.state_sector_get_info(block.miner, SECTOR_NUMBER, key)),
        RpcTest.identity(methods.msig_get_available_balance(multisig, key)),
        RpcTest.identity(methods.msig_get_pending(multisig, key)),
    ]


def eth_tests_with_tipset(tipset: Tipset) -> List[RpcTest]:
    return [
        RpcTest.identity(methods.eth_get_balance(ETH_FUNDED_ADDRESS, tipset.epoch)),
        RpcTest.identity(methods.eth_get_balance(ETH_MASKED_ID_ADDRESS, tipset.epoch)),
    ]


def registry_actor_tests(tipset: Tipset) -> List[RpcTest]:
    # Addresses taken from blocks mostly resolve to null on both nodes, which
    # tells nothing; these actors always have state.
    return [
        RpcTest.identity(methods.state_verified_client_status(id_address(VERIFIED_REGISTRY_ACTOR_ID), tipset.key)),
        RpcTest.identity(methods.state_verified_client_status(id_address(DATACAP_TOKEN_ACTOR_ID), tipset.key)),
    ]


def message_tests(cid: Cid, message: Message, root: Tipset, signed: bool) -> List[RpcTest]:
    """Tests scoped to one message, anchored at the root tipset."""
    root_key = root.key
    tests = [
        RpcTest.identity(methods.chain_get_message(cid)),
        RpcTest.identity(methods.state_account_key(message.from_, root_key)),
        RpcTest.identity(methods.state_account_key(message.from_, None)),
        RpcTest.identity(methods.state_lookup_id(message.from_, root_key)),
        validate_message_lookup(methods.state_wait_msg(cid, 0)).with_timeout(MESSAGE_WAIT_TIMEOUT_SECONDS),
        validate_message_lookup(methods.state_search_msg(cid)),
        validate_message_lookup(methods.state_search_msg_limited(cid, SEARCH_MESSAGE_LOOKBACK)),
        RpcTest.identity(methods.state_list_messages(message.to, message.from_, root_key, root.epoch)),
    ]
    if signed:
        tests.extend([
            RpcTest.basic(methods.mpool_get_nonce(message.from_)),
            RpcTest.identity(methods.state_list_messages(message.to, None, root_key, root.epoch)),
            RpcTest.identity(methods.state_list_messages(None, message.from_, root_key, root.epoch)),
            RpcTest.identity(methods.state_list_messages(None, None, root_key, root.epoch)),
        ])
        if message.params:
            tests.append(
                RpcTest.identity(methods.state_decode_params(message.to, message.method, message.params, root_key))
                .ignore("Decoding params requires the actor ABI")
            )
    return tests


def block_tests(block_cid: Cid, miner: str, root_key: TipsetKey) -> List[RpcTest]:
    return [
        RpcTest.identity(methods.chain_get_block_messages(block_cid)),
        RpcTest.identity(methods.chain_get_parent_messages(block_cid)),
        RpcTest.identity(methods.chain_get_parent_receipts(block_cid)),
        RpcTest.identity(methods.state_miner_active_sectors(miner, root_key)),
    ]


def miner_tests(miner: str, epoch: int, key: TipsetKey) -> List[RpcTest]:
    return [
        RpcTest.identity(methods.state_miner_info(miner, key)),
        RpcTest.identity(methods.state_miner_power(miner, key)),
        RpcTest.identity(methods.state_miner_deadlines(miner, key)),
        RpcTest.identity(methods.state_miner_proving_deadline(miner, key)),
        RpcTest.identity(methods.state_miner_available_balance(miner, key)),
        RpcTest.identity(methods.state_miner_faults(miner, key)),
        RpcTest.identity(methods.miner_get_base_info(miner, epoch, key)),
        RpcTest.identity(methods.state_miner_recoveries(miner, key)),
        RpcTest.identity(methods.state_miner_sector_count(miner, key)),
    ]


def tipset_tests(tipset: Tipset) -> List[RpcTest]:
    return [
        RpcTest.identity(methods.chain_get_messages_in_tipset(tipset.key)),
        RpcTest.identity(methods.state_circulating_supply(tipset.key)),
        RpcTest.identity(methods.state_vm_circulating_supply_internal(tipset.key)),
    ]


def _message_cid(message: Union[Message, SignedMessage]) -> Cid:
    if message.cid is None:
        raise ArchiveError("message without CID in archive")
    return message.cid


def snapshot_tests(archive: ChainArchive, n_tipsets: int) -> List[RpcTest]:
    """Derive tests from the last ``n_tipsets`` tipsets of ``archive``.

    Raises:
        GenerationError: If any archive read fails; no partial list is returned
    """
    try:
        return _generate(archive, n_tipsets)
    except ArchiveError as e:
        raise GenerationError(f"failed to generate tests from chain archive: {e.message}", **e.context) from e


def _generate(archive: ChainArchive, n_tipsets: int) -> List[RpcTest]:
    root = archive.heaviest_tipset()
    root_key = root.key

    tests: List[RpcTest] = []
    tests.extend(chain_tests_with_tipset(root))
    tests.extend(state_tests_with_tipset(root))
    tests.extend(eth_tests_with_tipset(root))
    tests.extend(registry_actor_tests(root))

    seen: Set[str] = set()
    walked = 0
    for tipset in archive.chain(root, n_tipsets):
        walked += 1
        replayed: List[Message] = []

        for block_cid, block in tipset.block_entries():
            tests.extend(block_tests(block_cid, block.miner, root_key))

            bls_messages, secp_messages = archive.block_messages(block)
            for message in bls_messages:
                cid = _message_cid(message)
                replayed.append(message)
                if cid.value not in seen:
                    seen.add(cid.value)
                    tests.extend(message_tests(cid, message, root, signed=False))
            for signed_message in secp_messages:
                cid = _message_cid(signed_message)
                replayed.append(signed_message.message)
                if cid.value not in seen:
                    seen.add(cid.value)
                    tests.extend(message_tests(cid, signed_message.message, root, signed=True))

            tests.extend(miner_tests(block.miner, block.height, tipset.key))

        tests.extend(tipset_tests(tipset))
        for message in replayed:
            tests.append(RpcTest.identity(methods.state_call(message, root_key)))

        for deal_id in archive.market_deal_ids(tipset)[:DEALS_PER_TIPSET]:
            tests.append(RpcTest.identity(methods.state_market_storage_deal(deal_id, tipset.key)))

    logger.info(
        "Generated snapshot tests",
        root_height=root.epoch,
        tipsets=walked,
        messages=len(seen),
        tests=len(tests),
    )
    return tests
