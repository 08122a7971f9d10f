"""
Node endpoint addresses.

Addresses use the multiaddr notation understood by Filecoin nodes, for
example ``/ip4/127.0.0.1/tcp/1234/http``, optionally prefixed with a JWT in
the ``FULLNODE_API_INFO`` style (``<token>:/ip4/127.0.0.1/tcp/1234/http``).
The trailing component selects the transport.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..models.core import Protocol
from ..models.errors import SetupError


DEFAULT_RPC_PATH = "/rpc/v0"

_HOST_PROTOCOLS = ("ip4", "ip6", "dns", "dns4", "dns6")
_VALUE_PROTOCOLS = _HOST_PROTOCOLS + ("tcp",)
_TAG_PROTOCOLS = ("http", "https", "ws", "wss")


@dataclass(frozen=True)
class ApiInfo:
    """A parsed node address.

    Attributes:
        host: Host name or IP address
        port: TCP port
        tag: Trailing transport component (http, https, ws, wss)
        token: Optional bearer token sent with every request
    """

    host: str
    port: int
    tag: str
    token: Optional[str] = None
    host_protocol: str = "ip4"

    @classmethod
    def from_str(cls, value: str) -> "ApiInfo":
        """Parse ``[token:]multiaddr``.

        Raises:
            SetupError: If the address is malformed
        """
        text = value.strip()
        token = None
        if not text.startswith("/") and ":/" in text:
            token, text = text.split(":/", 1)
            text = "/" + text

        components = _parse_multiaddr(text)
        values: Dict[str, str] = {}
        tags: List[str] = []
        for name, component_value in components:
            if component_value is None:
                tags.append(name)
            else:
                values[name] = component_value

        host_protocol = next((p for p in _HOST_PROTOCOLS if p in values), None)
        if host_protocol is None or "tcp" not in values:
            raise SetupError(f"address {value!r} must name a host and a tcp port", address=value)
        if len(tags) != 1:
            raise SetupError(f"address {value!r} must end with exactly one transport tag", address=value)

        try:
            port = int(values["tcp"])
        except ValueError:
            raise SetupError(f"invalid tcp port in address {value!r}", address=value)

        return cls(
            host=values[host_protocol],
            port=port,
            tag=tags[0],
            token=token or None,
            host_protocol=host_protocol,
        )

    @property
    def multiaddr(self) -> str:
        return f"/{self.host_protocol}/{self.host}/tcp/{self.port}/{self.tag}"

    def url(self, path: str = DEFAULT_RPC_PATH) -> str:
        host = f"[{self.host}]" if self.host_protocol == "ip6" else self.host
        return f"{self.tag}://{host}:{self.port}{path}"

    def headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def __str__(self) -> str:
        return self.multiaddr


def _parse_multiaddr(text: str) -> List[Tuple[str, Optional[str]]]:
    if not text.startswith("/"):
        raise SetupError(f"address {text!r} is not a multiaddr", address=text)

    parts = [part for part in text.split("/") if part]
    components: List[Tuple[str, Optional[str]]] = []
    index = 0
    while index < len(parts):
        name = parts[index]
        if name in _VALUE_PROTOCOLS:
            if index + 1 >= len(parts):
                raise SetupError(f"multiaddr component {name!r} is missing its value", address=text)
            components.append((name, parts[index + 1]))
            index += 2
        elif name in _TAG_PROTOCOLS:
            components.append((name, None))
            index += 1
        else:
            raise SetupError(f"unsupported multiaddr component {name!r}", address=text)
    return components


def derive_protocol(sut: ApiInfo, reference: ApiInfo) -> Protocol:
    """Pick the transport shared by both endpoints.

    Both addresses must end with the same tag, and that tag must be a
    supported transport.

    Raises:
        SetupError: On mismatching or unsupported tags
    """
    if sut.tag == reference.tag:
        try:
            return Protocol(sut.tag)
        except ValueError:
            raise SetupError(
                f"unsupported communication protocol: {sut.tag!r}",
                sut=str(sut),
                reference=str(reference),
            )
    raise SetupError(
        f"communication protocols mismatch: {sut.tag!r} (system under test) "
        f"is different from {reference.tag!r} (reference)",
        sut=str(sut),
        reference=str(reference),
    )
