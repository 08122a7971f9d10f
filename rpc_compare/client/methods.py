"""
Request builders for the Filecoin JSON-RPC methods exercised by the suites.

Each builder returns an ``RpcRequest`` whose parameters are already in Lotus
JSON form and whose ``result_type`` is the shape the node must answer with.
Tipset keys are passed as lists of CIDs; ``None`` selects the node's head.
"""

from typing import Any, Dict, List, Optional, Union

from ..models.chain import BeaconEntry, BlockHeader, Cid, Message, SignedMessage, Tipset, TipsetKey, tipset_key_json
from ..models.core import RpcRequest
from ..models.lotus_json import (
    ActorState,
    ActorStateJson,
    AddrInfo,
    ApiMessage,
    BlockMessages,
    CirculatingSupply,
    Deadline,
    DeadlineInfo,
    EthSyncingResult,
    HeadChange,
    InvocResult,
    MarketDeal,
    MessageFilter,
    MessageLookup,
    MinerInfo,
    MinerPower,
    MinerSectors,
    MiningBaseInfo,
    MsigPending,
    NatInfo,
    NetInfo,
    NodeStatus,
    Receipt,
    SectorOnChainInfo,
    Version,
)


PREFIX = "Filecoin."

# Domain separation tag used for randomness requests
ELECTION_PROOF_PRODUCTION = 2


def _tsk(key: Optional[TipsetKey]) -> Optional[List[Dict[str, str]]]:
    return tipset_key_json(key) if key is not None else None


def _request(method: str, params: List[Any], result_type: Any) -> RpcRequest:
    return RpcRequest(method_name=PREFIX + method, params=params, result_type=result_type)


# Common

def version() -> RpcRequest:
    return _request("Version", [], Version)


def start_time() -> RpcRequest:
    return _request("StartTime", [], str)


def discover() -> RpcRequest:
    return _request("Discover", [], Dict[str, Any])


def session() -> RpcRequest:
    return _request("Session", [], str)


# Beacon

def beacon_get_entry(epoch: int) -> RpcRequest:
    return _request("BeaconGetEntry", [epoch], BeaconEntry)


# Chain

def chain_head() -> RpcRequest:
    return _request("ChainHead", [], Tipset)


def chain_get_genesis() -> RpcRequest:
    return _request("ChainGetGenesis", [], Tipset)


def chain_get_block(cid: Cid) -> RpcRequest:
    return _request("ChainGetBlock", [cid.to_lotus_json()], BlockHeader)


def chain_get_tipset(key: TipsetKey) -> RpcRequest:
    return _request("ChainGetTipSet", [_tsk(key)], Tipset)


def chain_get_tipset_by_height(epoch: int, key: Optional[TipsetKey] = None) -> RpcRequest:
    return _request("ChainGetTipSetByHeight", [epoch, _tsk(key)], Tipset)


def chain_get_tipset_after_height(epoch: int, key: Optional[TipsetKey] = None) -> RpcRequest:
    return _request("ChainGetTipSetAfterHeight", [epoch, _tsk(key)], Tipset)


def chain_read_obj(cid: Cid) -> RpcRequest:
    return _request("ChainReadObj", [cid.to_lotus_json()], str)


def chain_has_obj(cid: Cid) -> RpcRequest:
    return _request("ChainHasObj", [cid.to_lotus_json()], bool)


def chain_get_path(start: TipsetKey, end: TipsetKey) -> RpcRequest:
    return _request("ChainGetPath", [_tsk(start), _tsk(end)], Optional[List[HeadChange]])


def chain_get_messages_in_tipset(key: TipsetKey) -> RpcRequest:
    return _request("ChainGetMessagesInTipset", [_tsk(key)], Optional[List[ApiMessage]])


def chain_get_block_messages(cid: Cid) -> RpcRequest:
    return _request("ChainGetBlockMessages", [cid.to_lotus_json()], BlockMessages)


def chain_get_parent_messages(cid: Cid) -> RpcRequest:
    return _request("ChainGetParentMessages", [cid.to_lotus_json()], Optional[List[ApiMessage]])


def chain_get_parent_receipts(cid: Cid) -> RpcRequest:
    return _request("ChainGetParentReceipts", [cid.to_lotus_json()], Optional[List[Receipt]])


def chain_get_message(cid: Cid) -> RpcRequest:
    return _request("ChainGetMessage", [cid.to_lotus_json()], Message)


def chain_notify() -> RpcRequest:
    return _request("ChainNotify", [], Any)


# Message pool

def mpool_pending(key: Optional[TipsetKey] = None) -> RpcRequest:
    return _request("MpoolPending", [_tsk(key) or []], Optional[List[SignedMessage]])


def mpool_get_nonce(address: str) -> RpcRequest:
    return _request("MpoolGetNonce", [address], int)


# Net

def net_addrs_listen() -> RpcRequest:
    return _request("NetAddrsListen", [], AddrInfo)


def net_peers() -> RpcRequest:
    return _request("NetPeers", [], Optional[List[AddrInfo]])


def net_listening() -> RpcRequest:
    return _request("NetListening", [], bool)


def net_agent_version(peer_id: str) -> RpcRequest:
    return _request("NetAgentVersion", [peer_id], str)


def net_info() -> RpcRequest:
    return _request("NetInfo", [], NetInfo)


def net_auto_nat_status() -> RpcRequest:
    return _request("NetAutoNatStatus", [], NatInfo)


def net_version() -> RpcRequest:
    return _request("NetVersion", [], str)


# Node

def node_status(include_chain_status: bool = True) -> RpcRequest:
    return _request("NodeStatus", [include_chain_status], NodeStatus)


# State

def state_network_name() -> RpcRequest:
    return _request("StateNetworkName", [], str)


def state_network_version(key: Optional[TipsetKey]) -> RpcRequest:
    return _request("StateNetworkVersion", [_tsk(key)], int)


def state_get_actor(address: str, key: Optional[TipsetKey]) -> RpcRequest:
    return _request("StateGetActor", [address, _tsk(key)], Optional[ActorState])


def state_read_state(address: str, key: Optional[TipsetKey]) -> RpcRequest:
    return _request("StateReadState", [address, _tsk(key)], ActorStateJson)


def state_get_randomness_from_tickets(
    key: Optional[TipsetKey], tag: int, epoch: int, entropy_b64: str
) -> RpcRequest:
    return _request("StateGetRandomnessFromTickets", [tag, epoch, entropy_b64, _tsk(key)], str)


def state_get_randomness_from_beacon(
    key: Optional[TipsetKey], tag: int, epoch: int, entropy_b64: str
) -> RpcRequest:
    return _request("StateGetRandomnessFromBeacon", [tag, epoch, entropy_b64, _tsk(key)], str)


def state_lookup_id(address: str, key: Optional[TipsetKey]) -> RpcRequest:
    return _request("StateLookupID", [address, _tsk(key)], Optional[str])


def state_account_key(address: str, key: Optional[TipsetKey]) -> RpcRequest:
    return _request("StateAccountKey", [address, _tsk(key)], str)


def state_list_miners(key: Optional[TipsetKey]) -> RpcRequest:
    return _request("StateListMiners", [_tsk(key)], Optional[List[str]])


def state_sector_get_info(miner: str, sector: int, key: Optional[TipsetKey]) -> RpcRequest:
    return _request("StateSectorGetInfo", [miner, sector, _tsk(key)], Optional[SectorOnChainInfo])


def state_verified_client_status(address: str, key: Optional[TipsetKey]) -> RpcRequest:
    return _request("StateVerifiedClientStatus", [address, _tsk(key)], Optional[str])


def state_wait_msg(cid: Cid, confidence: int) -> RpcRequest:
    return _request("StateWaitMsg", [cid.to_lotus_json(), confidence], Optional[MessageLookup])


def state_search_msg(cid: Cid) -> RpcRequest:
    return _request("StateSearchMsg", [cid.to_lotus_json()], Optional[MessageLookup])


def state_search_msg_limited(cid: Cid, limit: int) -> RpcRequest:
    return _request("StateSearchMsgLimited", [cid.to_lotus_json(), limit], Optional[MessageLookup])


def state_list_messages(
    to: Optional[str], from_: Optional[str], key: Optional[TipsetKey], max_height: int
) -> RpcRequest:
    message_filter = MessageFilter(to=to, from_=from_).to_lotus_json()
    return _request("StateListMessages", [message_filter, _tsk(key), max_height], Optional[List[Cid]])


def state_decode_params(to: str, method: int, params_b64: str, key: Optional[TipsetKey]) -> RpcRequest:
    return _request("StateDecodeParams", [to, method, params_b64, _tsk(key)], Any)


def state_call(message: Message, key: Optional[TipsetKey]) -> RpcRequest:
    return _request("StateCall", [message.unsigned_json(), _tsk(key)], InvocResult)


def state_circulating_supply(key: Optional[TipsetKey]) -> RpcRequest:
    return _request("StateCirculatingSupply", [_tsk(key)], str)


def state_vm_circulating_supply_internal(key: Optional[TipsetKey]) -> RpcRequest:
    return _request("StateVMCirculatingSupplyInternal", [_tsk(key)], CirculatingSupply)


def state_market_storage_deal(deal_id: int, key: Optional[TipsetKey]) -> RpcRequest:
    return _request("StateMarketStorageDeal", [deal_id, _tsk(key)], MarketDeal)


# Miner state

def state_miner_active_sectors(miner: str, key: Optional[TipsetKey]) -> RpcRequest:
    return _request("StateMinerActiveSectors", [miner, _tsk(key)], Optional[List[SectorOnChainInfo]])


def state_miner_info(miner: str, key: Optional[TipsetKey]) -> RpcRequest:
    return _request("StateMinerInfo", [miner, _tsk(key)], MinerInfo)


def state_miner_power(miner: str, key: Optional[TipsetKey]) -> RpcRequest:
    return _request("StateMinerPower", [miner, _tsk(key)], MinerPower)


def state_miner_deadlines(miner: str, key: Optional[TipsetKey]) -> RpcRequest:
    return _request("StateMinerDeadlines", [miner, _tsk(key)], List[Deadline])


def state_miner_proving_deadline(miner: str, key: Optional[TipsetKey]) -> RpcRequest:
    return _request("StateMinerProvingDeadline", [miner, _tsk(key)], DeadlineInfo)


def state_miner_available_balance(miner: str, key: Optional[TipsetKey]) -> RpcRequest:
    return _request("StateMinerAvailableBalance", [miner, _tsk(key)], str)


def state_miner_faults(miner: str, key: Optional[TipsetKey]) -> RpcRequest:
    return _request("StateMinerFaults", [miner, _tsk(key)], List[int])


def state_miner_recoveries(miner: str, key: Optional[TipsetKey]) -> RpcRequest:
    return _request("StateMinerRecoveries", [miner, _tsk(key)], List[int])


def state_miner_sector_count(miner: str, key: Optional[TipsetKey]) -> RpcRequest:
    return _request("StateMinerSectorCount", [miner, _tsk(key)], MinerSectors)


def miner_get_base_info(miner: str, epoch: int, key: Optional[TipsetKey]) -> RpcRequest:
    return _request("MinerGetBaseInfo", [miner, epoch, _tsk(key)], Optional[MiningBaseInfo])


# Multisig

def msig_get_available_balance(address: str, key: Optional[TipsetKey]) -> RpcRequest:
    return _request("MsigGetAvailableBalance", [address, _tsk(key)], str)


def msig_get_pending(address: str, key: Optional[TipsetKey]) -> RpcRequest:
    return _request("MsigGetPending", [address, _tsk(key)], Optional[List[MsigPending]])


# Wallet

def wallet_balance(address: str) -> RpcRequest:
    return _request("WalletBalance", [address], str)


def wallet_validate_address(address: str) -> RpcRequest:
    return _request("WalletValidateAddress", [address], str)


def wallet_verify(address: str, data_b64: str, signature: Dict[str, Any]) -> RpcRequest:
    return _request("WalletVerify", [address, data_b64, signature], bool)


# Ethereum compatibility

def eth_accounts() -> RpcRequest:
    return _request("EthAccounts", [], Optional[List[str]])


def eth_block_number() -> RpcRequest:
    return _request("EthBlockNumber", [], str)


def eth_chain_id() -> RpcRequest:
    return _request("EthChainId", [], str)


def eth_gas_price() -> RpcRequest:
    return _request("EthGasPrice", [], str)


def eth_syncing() -> RpcRequest:
    return _request("EthSyncing", [], Union[bool, EthSyncingResult])


def eth_get_balance(address: str, block: Union[str, int]) -> RpcRequest:
    """``block`` is a predefined tag (``latest``, ``pending``) or a height."""
    block_param = hex(block) if isinstance(block, int) else block
    return _request("EthGetBalance", [address, block_param], str)
