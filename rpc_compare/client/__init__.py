"""JSON-RPC clients for Filecoin nodes."""

from .api_info import ApiInfo, derive_protocol
from .transport import (
    ErrorKind,
    HttpRpcClient,
    RpcClient,
    RpcError,
    WebSocketRpcClient,
    create_client,
)

__all__ = [
    'ApiInfo',
    'derive_protocol',
    'ErrorKind',
    'HttpRpcClient',
    'RpcClient',
    'RpcError',
    'WebSocketRpcClient',
    'create_client',
]
