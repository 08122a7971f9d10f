"""Data models: statuses and requests, chain values, RPC result shapes and errors."""

from .core import EndpointStatus, Protocol, ResultKey, RpcRequest, RunMode
from .errors import (
    ArchiveError,
    ErrorCategory,
    ErrorSeverity,
    GenerationError,
    RpcCompareError,
    SetupError,
    TestRunFailure,
)

__all__ = [
    'EndpointStatus',
    'Protocol',
    'ResultKey',
    'RpcRequest',
    'RunMode',
    'ArchiveError',
    'ErrorCategory',
    'ErrorSeverity',
    'GenerationError',
    'RpcCompareError',
    'SetupError',
    'TestRunFailure',
]
