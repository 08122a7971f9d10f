"""
Literal chain fixtures used by the static suites.

Values refer to the calibration network, the chain the comparison is
normally run against.
"""

import base64
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Tuple


NETWORK_PREFIX = "t"

CALIBNET_BOOTSTRAP = """
/dns4/bootstrap-0.calibration.fildev.network/tcp/1347/p2p/12D3KooWCi2w8U4DDB9xqrejb5KYHaQv2iA2AJJ6uzG3iQxNLBMy
/dns4/bootstrap-1.calibration.fildev.network/tcp/1347/p2p/12D3KooWDTayrBojBn9jWNNUih4nNQQBGJD7Zo3gQCKgBkUsS6dp
/dns4/bootstrap-2.calibration.fildev.network/tcp/1347/p2p/12D3KooWNRxTHUn8bf7jz1KEUPMc2dMgGfa4f8ZJTsquVSn3vHCG
/dns4/bootstrap-3.calibration.fildev.network/tcp/1347/p2p/12D3KooWFWUqE9jgXvcKHWieYs9nhyp6NF4ftwLGAHm4sCv73jjK
"""

# Funded by the calibnet faucet; the private key has been discarded so the
# balance can only grow.
KNOWN_WALLET = "t1c4dkec3qhrnrsa4mccy7qntkyq2hhsma4sq7lui"
# "Hello world!" signed with KNOWN_WALLET
KNOWN_WALLET_SIGNATURE_HEX = (
    "44364ca78d85e53dda5ac6f719a4f2de3261c17f58558ab7730f80c478e6d437"
    "75244e7d6855afad82e4a1fd6449490acfa88e3fcfe7c1fe96ed549c100900b400"
)
SIGNED_TEXT = b"Hello world!"

ETH_FUNDED_ADDRESS = "0xff38c072f286e3b20b3954ca9f99c05fbecc64aa"
ETH_MASKED_ID_ADDRESS = "0xff000000000000000000000000000000000003ec"

# Builtin singleton actors
SYSTEM_ACTOR_ID = 0
VERIFIED_REGISTRY_ACTOR_ID = 6
DATACAP_TOKEN_ACTOR_ID = 7

MULTISIG_ACTOR_ID = 18101
UNKNOWN_ACTOR_ID = 0xdeadbeef

BEACON_ROUND = 10101

SECP256K1_SIGNATURE = 1
BLS_SIGNATURE = 2


def id_address(actor_id: int, prefix: str = NETWORK_PREFIX) -> str:
    return f"{prefix}0{actor_id}"


def parse_bootstrap_peers(text: str) -> List[str]:
    """One multiaddr per line; blank lines are skipped."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def peer_id_of(multiaddr: str) -> str:
    """The ``p2p`` component of a peer multiaddr."""
    head, separator, peer_id = multiaddr.rpartition("/")
    if not separator or not head or not peer_id:
        raise ValueError(f"no peer id in multiaddr {multiaddr!r}")
    return peer_id


def signature_type_of(address: str) -> int:
    protocol = address[1:2]
    if protocol == "1":
        return SECP256K1_SIGNATURE
    if protocol == "3":
        return BLS_SIGNATURE
    raise ValueError(f"address {address!r} cannot sign (must be bls or secp256k1)")


@dataclass(frozen=True)
class FixtureTable:
    """Read-only fixtures shared by the static suite builders."""
    bootstrap_peers: Tuple[str, ...]
    known_wallet: str
    signed_text_b64: str
    signature: Tuple[Tuple[str, object], ...]

    @property
    def peer_id(self) -> str:
        if not self.bootstrap_peers:
            raise ValueError("no bootstrap peers found")
        return peer_id_of(self.bootstrap_peers[-1])

    def signature_json(self) -> Dict[str, object]:
        return dict(self.signature)


@lru_cache(maxsize=None)
def load_fixtures() -> FixtureTable:
    signature_bytes = bytes.fromhex(KNOWN_WALLET_SIGNATURE_HEX)
    signature = (
        ("Type", signature_type_of(KNOWN_WALLET)),
        ("Data", base64.b64encode(signature_bytes).decode("ascii")),
    )
    return FixtureTable(
        bootstrap_peers=tuple(parse_bootstrap_peers(CALIBNET_BOOTSTRAP)),
        known_wallet=KNOWN_WALLET,
        signed_text_b64=base64.b64encode(SIGNED_TEXT).decode("ascii"),
        signature=signature,
    )
