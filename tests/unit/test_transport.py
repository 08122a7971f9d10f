"""
Unit tests for the JSON-RPC transports.
"""

import asyncio
import json
from unittest.mock import patch

import httpx
import pytest
from websockets.exceptions import InvalidURI

from rpc_compare.client import methods
from rpc_compare.client.api_info import ApiInfo
from rpc_compare.client.transport import (
    ErrorKind,
    HttpRpcClient,
    RpcError,
    WebSocketRpcClient,
    create_client,
    result_from_body,
)
from rpc_compare.models.core import Protocol


HTTP_INFO = ApiInfo.from_str("/ip4/127.0.0.1/tcp/1234/http")
WS_INFO = ApiInfo.from_str("/ip4/127.0.0.1/tcp/1234/ws")


def http_client(handler) -> HttpRpcClient:
    return HttpRpcClient(HTTP_INFO, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestRpcError:
    """Test error classification from JSON-RPC error objects."""

    @pytest.mark.parametrize("error, kind", [
        ({"code": -32601, "message": "method not found"}, ErrorKind.METHOD_NOT_FOUND),
        ({"code": -32600, "message": "invalid request"}, ErrorKind.INVALID_REQUEST),
        ({"code": -32007, "message": "request too big"}, ErrorKind.INVALID_REQUEST),
        ({"code": -32700, "message": "parse error"}, ErrorKind.PARSE_ERROR),
        ({"code": 0, "message": "request timed out"}, ErrorKind.TIMEOUT),
        ({"code": 1, "message": "actor not found"}, ErrorKind.SERVER_ERROR),
        ("something broke", ErrorKind.SERVER_ERROR),
    ])
    def test_from_error_object(self, error, kind):
        assert RpcError.from_error_object(error).kind is kind

    def test_result_from_body(self):
        assert result_from_body({"jsonrpc": "2.0", "id": 1, "result": [1, 2]}) == [1, 2]

    def test_result_from_body_null_result(self):
        assert result_from_body({"jsonrpc": "2.0", "id": 1, "result": None}) is None

    def test_result_from_body_without_result(self):
        with pytest.raises(RpcError) as exc_info:
            result_from_body({"jsonrpc": "2.0", "id": 1})

        assert exc_info.value.kind is ErrorKind.PARSE_ERROR


class TestHttpRpcClient:
    """Test the HTTP transport against a mocked server."""

    @pytest.mark.asyncio
    async def test_successful_call(self):
        """The request is a JSON-RPC 2.0 POST and the result is returned."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": seen["body"]["id"], "result": "calibrationnet"})

        async with http_client(handler) as client:
            result = await client.call(methods.state_network_name())

        assert result == "calibrationnet"
        assert seen["url"] == "http://127.0.0.1:1234/rpc/v0"
        assert seen["body"]["jsonrpc"] == "2.0"
        assert seen["body"]["method"] == "Filecoin.StateNetworkName"
        assert seen["body"]["params"] == []

    @pytest.mark.asyncio
    async def test_method_not_found(self):
        def handler(request):
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "nope"}})

        async with http_client(handler) as client:
            with pytest.raises(RpcError) as exc_info:
                await client.call(methods.version())

        assert exc_info.value.kind is ErrorKind.METHOD_NOT_FOUND
        assert exc_info.value.code == -32601

    @pytest.mark.asyncio
    async def test_error_object_with_http_error_status(self):
        """JSON-RPC errors are classified even when sent with an HTTP error status."""
        def handler(request):
            return httpx.Response(404, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "nope"}})

        async with http_client(handler) as client:
            with pytest.raises(RpcError) as exc_info:
                await client.call(methods.version())

        assert exc_info.value.kind is ErrorKind.METHOD_NOT_FOUND

    @pytest.mark.asyncio
    async def test_invalid_json_body(self):
        def handler(request):
            return httpx.Response(200, content=b"<html>")

        async with http_client(handler) as client:
            with pytest.raises(RpcError) as exc_info:
                await client.call(methods.version())

        assert exc_info.value.kind is ErrorKind.PARSE_ERROR

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        def handler(request):
            return httpx.Response(502, content=b"bad gateway")

        async with http_client(handler) as client:
            with pytest.raises(RpcError) as exc_info:
                await client.call(methods.version())

        assert exc_info.value.kind is ErrorKind.TRANSPORT

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        async with http_client(handler) as client:
            with pytest.raises(RpcError) as exc_info:
                await client.call(methods.version().with_timeout(5.0))

        assert exc_info.value.kind is ErrorKind.TIMEOUT
        assert "5.0" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with http_client(handler) as client:
            with pytest.raises(RpcError) as exc_info:
                await client.call(methods.version())

        assert exc_info.value.kind is ErrorKind.TRANSPORT

    def test_request_ids_increase(self):
        client = HttpRpcClient(HTTP_INFO, client=httpx.AsyncClient())

        assert [client.next_id() for _ in range(3)] == [1, 2, 3]

    def test_timeout_for(self):
        client = HttpRpcClient(HTTP_INFO, default_timeout=12.0, client=httpx.AsyncClient())

        assert client.timeout_for(methods.version()) == 12.0
        assert client.timeout_for(methods.version().with_timeout(30.0)) == 30.0


class FakeConnection:
    """Stands in for a websockets client connection."""

    def __init__(self, responder):
        self.responder = responder
        self.frames = []
        self.sent = []

    async def send(self, message):
        payload = json.loads(message)
        self.sent.append(payload)
        self.frames.extend(self.responder(payload))

    async def recv(self):
        if not self.frames:
            await asyncio.sleep(3600)
        return self.frames.pop(0)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class TestWebSocketRpcClient:
    """Test the WebSocket transport with a patched connection."""

    @pytest.mark.asyncio
    async def test_skips_notifications_and_foreign_ids(self):
        """Only the frame answering the request id is used."""
        def responder(payload):
            return [
                json.dumps({"jsonrpc": "2.0", "method": "xrpc.ch.val", "params": [1, []]}),
                json.dumps({"jsonrpc": "2.0", "id": payload["id"] + 100, "result": "other"}),
                json.dumps({"jsonrpc": "2.0", "id": payload["id"], "result": "calibrationnet"}),
            ]

        connection = FakeConnection(responder)
        with patch("rpc_compare.client.transport.websockets.connect", return_value=connection) as connect:
            client = WebSocketRpcClient(WS_INFO)
            result = await client.call(methods.state_network_name())

        assert result == "calibrationnet"
        assert connection.sent[0]["method"] == "Filecoin.StateNetworkName"
        assert connect.call_args.args[0] == "ws://127.0.0.1:1234/rpc/v0"

    @pytest.mark.asyncio
    async def test_error_response(self):
        def responder(payload):
            return [json.dumps({"jsonrpc": "2.0", "id": payload["id"], "error": {"code": -32601, "message": "x"}})]

        with patch("rpc_compare.client.transport.websockets.connect", return_value=FakeConnection(responder)):
            client = WebSocketRpcClient(WS_INFO)
            with pytest.raises(RpcError) as exc_info:
                await client.call(methods.chain_notify())

        assert exc_info.value.kind is ErrorKind.METHOD_NOT_FOUND

    @pytest.mark.asyncio
    async def test_timeout(self):
        """A silent server times the call out."""
        with patch("rpc_compare.client.transport.websockets.connect", return_value=FakeConnection(lambda payload: [])):
            client = WebSocketRpcClient(WS_INFO)
            with pytest.raises(RpcError) as exc_info:
                await client.call(methods.version().with_timeout(0.05))

        assert exc_info.value.kind is ErrorKind.TIMEOUT

    @pytest.mark.asyncio
    async def test_invalid_frame(self):
        with patch("rpc_compare.client.transport.websockets.connect",
                   return_value=FakeConnection(lambda payload: ["not json"])):
            client = WebSocketRpcClient(WS_INFO)
            with pytest.raises(RpcError) as exc_info:
                await client.call(methods.version())

        assert exc_info.value.kind is ErrorKind.PARSE_ERROR

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        with patch("rpc_compare.client.transport.websockets.connect", side_effect=OSError("refused")):
            client = WebSocketRpcClient(WS_INFO)
            with pytest.raises(RpcError) as exc_info:
                await client.call(methods.version())

        assert exc_info.value.kind is ErrorKind.TRANSPORT

    @pytest.mark.asyncio
    async def test_websocket_exception(self):
        with patch("rpc_compare.client.transport.websockets.connect", side_effect=InvalidURI("ws://x", "bad")):
            client = WebSocketRpcClient(WS_INFO)
            with pytest.raises(RpcError) as exc_info:
                await client.call(methods.version())

        assert exc_info.value.kind is ErrorKind.TRANSPORT


class TestCreateClient:
    """Test client selection by protocol."""

    @pytest.mark.asyncio
    async def test_http(self):
        client = create_client(HTTP_INFO, Protocol.HTTP, 10.0)

        assert isinstance(client, HttpRpcClient)
        assert client.default_timeout == 10.0
        await client.close()

    def test_ws(self):
        assert isinstance(create_client(WS_INFO, Protocol.WS), WebSocketRpcClient)
