"""
Core data models shared by the test builders, the executor and the reporter.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional


class EndpointStatus(Enum):
    """Outcome of one RPC call on one endpoint.

    Declaration order is the sort order used by the report.
    """
    # RPC method is missing
    MISSING_METHOD = "MissingMethod"
    # Request rejected as malformed JSON-RPC
    INVALID_REQUEST = "InvalidRequest"
    # Catch-all for errors on the node
    INTERNAL_SERVER_ERROR = "InternalServerError"
    # Unexpected JSON schema
    INVALID_JSON = "InvalidJSON"
    # Right JSON schema but the value failed the comparison
    INVALID_RESPONSE = "InvalidResponse"
    TIMEOUT = "Timeout"
    VALID = "Valid"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)

    def __str__(self) -> str:
        return self.value


_STATUS_ORDER = list(EndpointStatus)


class RunMode(str, Enum):
    """Which tests to run with respect to their ignore marker."""
    DEFAULT = "default"
    IGNORED_ONLY = "ignored-only"
    ALL = "all"


class Protocol(str, Enum):
    """Transport used to reach both endpoints."""
    HTTP = "http"
    WS = "ws"


class ResultKey(NamedTuple):
    """Aggregation key for one executed test."""
    method: str
    sut: EndpointStatus
    reference: EndpointStatus

    def sort_key(self):
        return (self.method, self.sut.rank, self.reference.rank)

    def is_success(self) -> bool:
        both_valid = self.sut is EndpointStatus.VALID and self.reference is EndpointStatus.VALID
        both_timeout = self.sut is EndpointStatus.TIMEOUT and self.reference is EndpointStatus.TIMEOUT
        return both_valid or both_timeout


@dataclass(frozen=True)
class RpcRequest:
    """A JSON-RPC request together with the shape of its expected result.

    Attributes:
        method_name: Fully qualified RPC method, e.g. ``Filecoin.ChainHead``
        params: Positional parameters, already in wire (Lotus JSON) form
        result_type: Type the ``result`` member must deserialize into
        timeout: Per-call timeout in seconds, ``None`` for the default
    """

    method_name: str
    params: List[Any] = field(default_factory=list)
    result_type: Any = Any
    timeout: Optional[float] = None

    def with_timeout(self, timeout: float) -> "RpcRequest":
        return replace(self, timeout=timeout)

    def to_payload(self, request_id: int = 0) -> Dict[str, Any]:
        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "method": self.method_name,
            "params": list(self.params),
        }
