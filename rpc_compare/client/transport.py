"""
JSON-RPC transports.

Both clients expose the same ``call`` coroutine: it returns the ``result``
member of the response or raises ``RpcError``. Every failure, whether
reported by the node or by the transport, is folded into the closed
``ErrorKind`` set so that callers never have to inspect messages.
"""

import asyncio
import itertools
import json
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional

import httpx
import websockets
from websockets.exceptions import WebSocketException

from ..models.core import Protocol, RpcRequest
from ..utils.logging import LoggerMixin
from .api_info import ApiInfo


DEFAULT_TIMEOUT_SECONDS = 60.0

PARSE_ERROR_CODE = -32700
INVALID_REQUEST_CODE = -32600
METHOD_NOT_FOUND_CODE = -32601
OVERSIZED_REQUEST_CODE = -32007


class ErrorKind(str, Enum):
    """Classification signal carried by every ``RpcError``."""
    METHOD_NOT_FOUND = "method_not_found"
    INVALID_REQUEST = "invalid_request"
    PARSE_ERROR = "parse_error"
    TIMEOUT = "timeout"
    SERVER_ERROR = "server_error"
    TRANSPORT = "transport"


class RpcError(Exception):
    """A failed RPC call."""

    def __init__(self, kind: ErrorKind, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.code = code

    @classmethod
    def from_error_object(cls, error: Any) -> "RpcError":
        """Build an error from a JSON-RPC ``error`` member."""
        if not isinstance(error, dict):
            return cls(ErrorKind.SERVER_ERROR, str(error))

        code = error.get("code")
        message = str(error.get("message", ""))
        if code == METHOD_NOT_FOUND_CODE:
            kind = ErrorKind.METHOD_NOT_FOUND
        elif code in (INVALID_REQUEST_CODE, OVERSIZED_REQUEST_CODE):
            kind = ErrorKind.INVALID_REQUEST
        elif code == PARSE_ERROR_CODE:
            kind = ErrorKind.PARSE_ERROR
        elif code == 0 and "timed out" in message:
            # Some nodes report their own deadline this way.
            kind = ErrorKind.TIMEOUT
        else:
            kind = ErrorKind.SERVER_ERROR
        return cls(kind, message, code if isinstance(code, int) else None)

    def __repr__(self) -> str:
        return f"RpcError(kind={self.kind.value!r}, code={self.code!r}, message={self.message!r})"


def result_from_body(body: Any) -> Any:
    """Extract ``result`` from a decoded JSON-RPC response."""
    if not isinstance(body, dict):
        raise RpcError(ErrorKind.PARSE_ERROR, "response is not a JSON object")
    if body.get("error") is not None:
        raise RpcError.from_error_object(body["error"])
    if "result" not in body:
        raise RpcError(ErrorKind.PARSE_ERROR, "response has neither result nor error")
    return body["result"]


class RpcClient(ABC, LoggerMixin):
    """Issues JSON-RPC calls against one node."""

    def __init__(self, api_info: ApiInfo, default_timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.api_info = api_info
        self.default_timeout = default_timeout
        self._ids = itertools.count(1)

    def timeout_for(self, request: RpcRequest) -> float:
        return request.timeout if request.timeout is not None else self.default_timeout

    def next_id(self) -> int:
        return next(self._ids)

    @abstractmethod
    async def call(self, request: RpcRequest) -> Any:
        """Send ``request`` and return the decoded ``result``.

        Raises:
            RpcError: On any failure, including the per-call timeout
        """
        pass

    async def close(self) -> None:
        pass

    async def __aenter__(self) -> "RpcClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


class HttpRpcClient(RpcClient):
    """Request/response transport over HTTP POST."""

    def __init__(
        self,
        api_info: ApiInfo,
        default_timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None
    ):
        super().__init__(api_info, default_timeout)
        self._client = client or httpx.AsyncClient(headers=api_info.headers())

    async def call(self, request: RpcRequest) -> Any:
        timeout = self.timeout_for(request)
        payload = request.to_payload(self.next_id())

        try:
            response = await self._client.post(self.api_info.url(), json=payload, timeout=timeout)
        except httpx.TimeoutException:
            raise RpcError(ErrorKind.TIMEOUT, f"request timed out after {timeout}s")
        except httpx.HTTPError as e:
            raise RpcError(ErrorKind.TRANSPORT, f"{type(e).__name__}: {e}")

        try:
            body = response.json()
        except ValueError:
            if response.status_code >= 400:
                raise RpcError(ErrorKind.TRANSPORT, f"HTTP status {response.status_code}")
            raise RpcError(ErrorKind.PARSE_ERROR, "response body is not valid JSON")

        if isinstance(body, dict) and body.get("error") is None and response.status_code >= 400:
            raise RpcError(ErrorKind.TRANSPORT, f"HTTP status {response.status_code}")
        return result_from_body(body)

    async def close(self) -> None:
        await self._client.aclose()


class WebSocketRpcClient(RpcClient):
    """Streaming transport: each call opens its own WebSocket connection.

    Messages that do not carry the request id (subscription notifications)
    are skipped while waiting for the response.
    """

    async def call(self, request: RpcRequest) -> Any:
        timeout = self.timeout_for(request)
        try:
            return await asyncio.wait_for(self._exchange(request), timeout=timeout)
        except asyncio.TimeoutError:
            raise RpcError(ErrorKind.TIMEOUT, f"request timed out after {timeout}s")

    async def _exchange(self, request: RpcRequest) -> Any:
        request_id = self.next_id()
        payload = json.dumps(request.to_payload(request_id))
        try:
            async with websockets.connect(
                self.api_info.url(),
                additional_headers=self.api_info.headers(),
                max_size=None
            ) as connection:
                await connection.send(payload)
                while True:
                    raw = await connection.recv()
                    try:
                        body = json.loads(raw)
                    except ValueError:
                        raise RpcError(ErrorKind.PARSE_ERROR, "response frame is not valid JSON")
                    if isinstance(body, dict) and body.get("id") not in (None, request_id):
                        continue
                    if isinstance(body, dict) and "id" not in body and "method" in body:
                        continue
                    return result_from_body(body)
        except WebSocketException as e:
            raise RpcError(ErrorKind.TRANSPORT, f"{type(e).__name__}: {e}")
        except OSError as e:
            raise RpcError(ErrorKind.TRANSPORT, f"{type(e).__name__}: {e}")


def create_client(
    api_info: ApiInfo,
    protocol: Protocol,
    default_timeout: float = DEFAULT_TIMEOUT_SECONDS
) -> RpcClient:
    """Build the client matching ``protocol``."""
    if protocol == Protocol.WS:
        return WebSocketRpcClient(api_info, default_timeout)
    return HttpRpcClient(api_info, default_timeout)
