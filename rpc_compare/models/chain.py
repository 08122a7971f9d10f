"""
Chain data models in Lotus JSON shape.

The same models describe chain archive contents and the results of the chain
RPC methods, so a value read from a snapshot can be sent as a parameter
without further mapping.
"""

import base64
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class LotusJson(BaseModel):
    """Base for every Lotus JSON shape. Unknown fields are dropped on decode."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_lotus_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class Cid(LotusJson):
    """Content identifier, encoded as ``{"/": "bafy..."}``."""
    value: str = Field(..., alias="/", min_length=1)

    def __str__(self) -> str:
        return self.value

    def __hash__(self) -> int:
        return hash(self.value)


TipsetKey = List[Cid]


def tipset_key_json(key: TipsetKey) -> List[Dict[str, str]]:
    return [cid.to_lotus_json() for cid in key]


class Signature(LotusJson):
    type: int = Field(..., alias="Type")
    data: Optional[str] = Field(None, alias="Data")


class Ticket(LotusJson):
    vrf_proof: str = Field(..., alias="VRFProof")

    def proof_bytes(self) -> bytes:
        return base64.b64decode(self.vrf_proof)


class ElectionProof(LotusJson):
    win_count: int = Field(..., alias="WinCount")
    vrf_proof: str = Field(..., alias="VRFProof")


class BeaconEntry(LotusJson):
    round: int = Field(..., alias="Round")
    data: str = Field(..., alias="Data")


class PoStProof(LotusJson):
    po_st_proof: int = Field(..., alias="PoStProof")
    proof_bytes: str = Field(..., alias="ProofBytes")


class BlockHeader(LotusJson):
    miner: str = Field(..., alias="Miner")
    ticket: Optional[Ticket] = Field(None, alias="Ticket")
    election_proof: Optional[ElectionProof] = Field(None, alias="ElectionProof")
    beacon_entries: Optional[List[BeaconEntry]] = Field(None, alias="BeaconEntries")
    win_post_proof: Optional[List[PoStProof]] = Field(None, alias="WinPoStProof")
    parents: List[Cid] = Field(..., alias="Parents")
    parent_weight: str = Field(..., alias="ParentWeight")
    height: int = Field(..., alias="Height", ge=0)
    parent_state_root: Cid = Field(..., alias="ParentStateRoot")
    parent_message_receipts: Cid = Field(..., alias="ParentMessageReceipts")
    messages: Cid = Field(..., alias="Messages")
    bls_aggregate: Optional[Signature] = Field(None, alias="BLSAggregate")
    timestamp: int = Field(..., alias="Timestamp")
    block_sig: Optional[Signature] = Field(None, alias="BlockSig")
    fork_signaling: int = Field(0, alias="ForkSignaling")
    parent_base_fee: str = Field("0", alias="ParentBaseFee")


class Tipset(LotusJson):
    """A consensus round: the blocks at one height sharing the same parents."""
    cids: List[Cid] = Field(..., alias="Cids", min_length=1)
    blocks: List[BlockHeader] = Field(..., alias="Blocks", min_length=1)
    height: int = Field(..., alias="Height", ge=0)

    @property
    def key(self) -> TipsetKey:
        return self.cids

    @property
    def epoch(self) -> int:
        return self.height

    @property
    def parents(self) -> TipsetKey:
        return self.blocks[0].parents

    @property
    def parent_state(self) -> Cid:
        return self.blocks[0].parent_state_root

    @property
    def weight(self) -> int:
        return int(self.blocks[0].parent_weight)

    def block_entries(self) -> List[Tuple[Cid, BlockHeader]]:
        return list(zip(self.cids, self.blocks))

    def min_ticket_block(self) -> Tuple[Cid, BlockHeader]:
        """The block with the smallest ticket, ties broken by CID."""
        def ticket_order(entry):
            cid, block = entry
            proof = block.ticket.proof_bytes() if block.ticket else b""
            return (proof, cid.value)

        return min(self.block_entries(), key=ticket_order)


class Message(LotusJson):
    version: int = Field(0, alias="Version")
    to: str = Field(..., alias="To")
    from_: str = Field(..., alias="From")
    nonce: int = Field(..., alias="Nonce", ge=0)
    value: str = Field(..., alias="Value")
    gas_limit: int = Field(..., alias="GasLimit")
    gas_fee_cap: str = Field(..., alias="GasFeeCap")
    gas_premium: str = Field(..., alias="GasPremium")
    method: int = Field(..., alias="Method", ge=0)
    params: Optional[str] = Field(None, alias="Params")
    cid: Optional[Cid] = Field(None, alias="CID")

    def unsigned_json(self) -> Dict[str, Any]:
        """Wire form of the message without its CID annotation."""
        return self.model_dump(by_alias=True, mode="json", exclude={"cid"})


class SignedMessage(LotusJson):
    message: Message = Field(..., alias="Message")
    signature: Signature = Field(..., alias="Signature")
    cid: Optional[Cid] = Field(None, alias="CID")
