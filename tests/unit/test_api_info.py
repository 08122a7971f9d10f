"""
Unit tests for endpoint addresses and transport derivation.
"""

import pytest

from rpc_compare.client.api_info import ApiInfo, derive_protocol
from rpc_compare.models.core import Protocol
from rpc_compare.models.errors import SetupError


class TestApiInfo:
    """Test address parsing."""

    def test_parse_http_multiaddr(self):
        """A plain multiaddr yields host, port and tag."""
        info = ApiInfo.from_str("/ip4/127.0.0.1/tcp/1234/http")

        assert info.host == "127.0.0.1"
        assert info.port == 1234
        assert info.tag == "http"
        assert info.token is None
        assert info.url() == "http://127.0.0.1:1234/rpc/v0"
        assert info.headers() == {}

    def test_parse_token_prefix(self):
        """A FULLNODE_API_INFO style token is split off and sent as bearer."""
        info = ApiInfo.from_str("eyJhbGciOi.abc:/ip4/10.0.0.2/tcp/2345/ws")

        assert info.token == "eyJhbGciOi.abc"
        assert info.tag == "ws"
        assert info.url() == "ws://10.0.0.2:2345/rpc/v0"
        assert info.headers() == {"Authorization": "Bearer eyJhbGciOi.abc"}

    def test_parse_dns(self):
        """DNS hosts are accepted."""
        info = ApiInfo.from_str("/dns4/node.example.org/tcp/443/https")

        assert info.host == "node.example.org"
        assert info.multiaddr == "/dns4/node.example.org/tcp/443/https"

    def test_parse_ip6_url(self):
        """IPv6 hosts are bracketed in URLs."""
        info = ApiInfo.from_str("/ip6/::1/tcp/1234/http")

        assert info.url() == "http://[::1]:1234/rpc/v0"

    @pytest.mark.parametrize("value", [
        "127.0.0.1:1234",
        "/ip4/127.0.0.1/http",
        "/ip4/127.0.0.1/tcp/1234",
        "/ip4/127.0.0.1/tcp/notaport/http",
        "/ip4/127.0.0.1/tcp/1234/quic/http",
        "/ip4/127.0.0.1/tcp",
    ])
    def test_malformed_addresses(self, value):
        """Malformed addresses are setup errors."""
        with pytest.raises(SetupError):
            ApiInfo.from_str(value)


class TestDeriveProtocol:
    """Test protocol derivation from both endpoints."""

    def test_both_http(self):
        """Two HTTP endpoints resolve to HTTP."""
        sut = ApiInfo.from_str("/ip4/127.0.0.1/tcp/2345/http")
        reference = ApiInfo.from_str("/ip4/127.0.0.1/tcp/1234/http")

        assert derive_protocol(sut, reference) is Protocol.HTTP

    def test_both_ws(self):
        """Two WebSocket endpoints resolve to WS."""
        sut = ApiInfo.from_str("/ip4/127.0.0.1/tcp/2345/ws")
        reference = ApiInfo.from_str("/ip4/127.0.0.1/tcp/1234/ws")

        assert derive_protocol(sut, reference) is Protocol.WS

    def test_mismatch(self):
        """Different tags are fatal."""
        sut = ApiInfo.from_str("/ip4/127.0.0.1/tcp/2345/http")
        reference = ApiInfo.from_str("/ip4/127.0.0.1/tcp/1234/ws")

        with pytest.raises(SetupError) as exc_info:
            derive_protocol(sut, reference)

        assert "mismatch" in exc_info.value.message

    def test_unsupported_shared_tag(self):
        """A shared tag without a transport is fatal."""
        sut = ApiInfo.from_str("/ip4/127.0.0.1/tcp/2345/wss")
        reference = ApiInfo.from_str("/ip4/127.0.0.1/tcp/1234/wss")

        with pytest.raises(SetupError) as exc_info:
            derive_protocol(sut, reference)

        assert "unsupported" in exc_info.value.message
