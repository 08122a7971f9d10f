"""
Lotus JSON result shapes for the state, market, net and node RPC methods.

A response passes the syntax check of a test when its ``result`` member
validates against the declared shape; identity tests compare the decoded
models, so fields not declared here never take part in a comparison.
"""

from typing import Any, Dict, List, Optional

from pydantic import Field

from .chain import Cid, LotusJson, Message, SignedMessage, TipsetKey


class Version(LotusJson):
    version: str = Field(..., alias="Version")
    api_version: int = Field(..., alias="APIVersion")
    block_delay: int = Field(..., alias="BlockDelay")


class Receipt(LotusJson):
    exit_code: int = Field(..., alias="ExitCode")
    return_data: Optional[str] = Field(None, alias="Return")
    gas_used: int = Field(..., alias="GasUsed")
    events_root: Optional[Cid] = Field(None, alias="EventsRoot")


class MessageLookup(LotusJson):
    message: Cid = Field(..., alias="Message")
    receipt: Receipt = Field(..., alias="Receipt")
    return_dec: Any = Field(None, alias="ReturnDec")
    tipset: TipsetKey = Field(..., alias="TipSet")
    height: int = Field(..., alias="Height")


class BlockMessages(LotusJson):
    bls_messages: List[Message] = Field(default_factory=list, alias="BlsMessages")
    secpk_messages: List[SignedMessage] = Field(default_factory=list, alias="SecpkMessages")
    cids: List[Cid] = Field(default_factory=list, alias="Cids")


class ApiMessage(LotusJson):
    cid: Cid = Field(..., alias="Cid")
    message: Message = Field(..., alias="Message")


class ActorState(LotusJson):
    code: Cid = Field(..., alias="Code")
    head: Cid = Field(..., alias="Head")
    nonce: int = Field(..., alias="Nonce")
    balance: str = Field(..., alias="Balance")
    address: Optional[str] = Field(None, alias="Address")


class ActorStateJson(LotusJson):
    balance: str = Field(..., alias="Balance")
    code: Cid = Field(..., alias="Code")
    state: Any = Field(None, alias="State")


class Claim(LotusJson):
    raw_byte_power: str = Field(..., alias="RawBytePower")
    quality_adj_power: str = Field(..., alias="QualityAdjPower")


class MinerPower(LotusJson):
    miner_power: Claim = Field(..., alias="MinerPower")
    total_power: Claim = Field(..., alias="TotalPower")
    has_min_power: bool = Field(..., alias="HasMinPower")


class SectorOnChainInfo(LotusJson):
    sector_number: int = Field(..., alias="SectorNumber")
    seal_proof: int = Field(..., alias="SealProof")
    sealed_cid: Cid = Field(..., alias="SealedCID")
    deal_ids: Optional[List[int]] = Field(None, alias="DealIDs")
    activation: int = Field(..., alias="Activation")
    expiration: int = Field(..., alias="Expiration")
    deal_weight: str = Field(..., alias="DealWeight")
    verified_deal_weight: str = Field(..., alias="VerifiedDealWeight")
    initial_pledge: str = Field(..., alias="InitialPledge")


class DeadlineInfo(LotusJson):
    current_epoch: int = Field(..., alias="CurrentEpoch")
    period_start: int = Field(..., alias="PeriodStart")
    index: int = Field(..., alias="Index")
    open: int = Field(..., alias="Open")
    close: int = Field(..., alias="Close")
    challenge: int = Field(..., alias="Challenge")
    fault_cutoff: int = Field(..., alias="FaultCutoff")


class Deadline(LotusJson):
    post_submissions: List[int] = Field(..., alias="PostSubmissions")
    disputable_proof_count: int = Field(..., alias="DisputableProofCount")


class MinerInfo(LotusJson):
    owner: str = Field(..., alias="Owner")
    worker: str = Field(..., alias="Worker")
    new_worker: Optional[str] = Field(None, alias="NewWorker")
    control_addresses: Optional[List[str]] = Field(None, alias="ControlAddresses")
    peer_id: Optional[str] = Field(None, alias="PeerId")
    multiaddrs: Optional[List[str]] = Field(None, alias="Multiaddrs")
    window_post_proof_type: int = Field(..., alias="WindowPoStProofType")
    sector_size: int = Field(..., alias="SectorSize")
    window_post_partition_sectors: int = Field(..., alias="WindowPoStPartitionSectors")
    consensus_fault_elapsed: int = Field(..., alias="ConsensusFaultElapsed")


class MinerSectors(LotusJson):
    live: int = Field(..., alias="Live")
    active: int = Field(..., alias="Active")
    faulty: int = Field(..., alias="Faulty")


class MiningBaseInfo(LotusJson):
    miner_power: str = Field(..., alias="MinerPower")
    network_power: str = Field(..., alias="NetworkPower")
    sectors: Optional[List[Dict[str, Any]]] = Field(None, alias="Sectors")
    worker_key: str = Field(..., alias="WorkerKey")
    sector_size: int = Field(..., alias="SectorSize")
    prev_beacon_entry: Dict[str, Any] = Field(..., alias="PrevBeaconEntry")
    beacon_entries: Optional[List[Dict[str, Any]]] = Field(None, alias="BeaconEntries")
    eligible_for_mining: bool = Field(..., alias="EligibleForMining")


class CirculatingSupply(LotusJson):
    fil_vested: str = Field(..., alias="FilVested")
    fil_mined: str = Field(..., alias="FilMined")
    fil_burnt: str = Field(..., alias="FilBurnt")
    fil_locked: str = Field(..., alias="FilLocked")
    fil_circulating: str = Field(..., alias="FilCirculating")
    fil_reserve_disbursed: str = Field(..., alias="FilReserveDisbursed")


class InvocResult(LotusJson):
    msg: Message = Field(..., alias="Msg")
    msg_rct: Optional[Receipt] = Field(None, alias="MsgRct")
    error: str = Field("", alias="Error")


class DealProposal(LotusJson):
    piece_cid: Cid = Field(..., alias="PieceCID")
    piece_size: int = Field(..., alias="PieceSize")
    verified_deal: bool = Field(..., alias="VerifiedDeal")
    client: str = Field(..., alias="Client")
    provider: str = Field(..., alias="Provider")
    label: Any = Field(None, alias="Label")
    start_epoch: int = Field(..., alias="StartEpoch")
    end_epoch: int = Field(..., alias="EndEpoch")
    storage_price_per_epoch: str = Field(..., alias="StoragePricePerEpoch")
    provider_collateral: str = Field(..., alias="ProviderCollateral")
    client_collateral: str = Field(..., alias="ClientCollateral")


class DealState(LotusJson):
    sector_start_epoch: int = Field(..., alias="SectorStartEpoch")
    last_updated_epoch: int = Field(..., alias="LastUpdatedEpoch")
    slash_epoch: int = Field(..., alias="SlashEpoch")


class MarketDeal(LotusJson):
    proposal: DealProposal = Field(..., alias="Proposal")
    state: DealState = Field(..., alias="State")


class AddrInfo(LotusJson):
    id: str = Field(..., alias="ID")
    addrs: Optional[List[str]] = Field(None, alias="Addrs")


class NatInfo(LotusJson):
    reachability: int = Field(..., alias="Reachability")
    public_addrs: Optional[List[str]] = Field(None, alias="PublicAddrs")


class NetInfo(LotusJson):
    num_peers: int = Field(..., alias="num_peers")
    num_connections: int = Field(..., alias="num_connections")
    num_pending: int = Field(..., alias="num_pending")
    num_pending_incoming: int = Field(..., alias="num_pending_incoming")
    num_pending_outgoing: int = Field(..., alias="num_pending_outgoing")
    num_established: int = Field(..., alias="num_established")


class NodeStatus(LotusJson):
    sync_status: Dict[str, Any] = Field(..., alias="SyncStatus")
    peer_status: Dict[str, Any] = Field(..., alias="PeerStatus")
    chain_status: Dict[str, Any] = Field(..., alias="ChainStatus")


class HeadChange(LotusJson):
    type: str = Field(..., alias="Type")
    val: Dict[str, Any] = Field(..., alias="Val")


class MessageFilter(LotusJson):
    to: Optional[str] = Field(None, alias="To")
    from_: Optional[str] = Field(None, alias="From")


class MsigPending(LotusJson):
    id: int = Field(..., alias="ID")
    to: str = Field(..., alias="To")
    value: str = Field(..., alias="Value")
    method: int = Field(..., alias="Method")
    params: Optional[str] = Field(None, alias="Params")
    approved: Optional[List[str]] = Field(None, alias="Approved")


class EthSyncingResult(LotusJson):
    starting_block: str = Field(..., alias="startingBlock")
    current_block: str = Field(..., alias="currentBlock")
    highest_block: str = Field(..., alias="highestBlock")
