"""Connection addressing: ``scheme://principal@host:port?certs=<dir>``."""

import ssl
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import parse_qs, quote, unquote, urlencode, urlsplit

from ..core.errors import SetupError
from ..datastructures.type_aliases import (
    EndpointURL,
    HostAddress,
    NodeAddress,
    PortNumber,
    Principal,
)

ADMIN_PRINCIPAL: Principal = "root"
DEFAULT_SCHEME = "https"

SECURE_SCHEMES = frozenset({"https", "wss"})
INSECURE_SCHEMES = frozenset({"http", "ws"})

CA_CERT_NAME = "ca.crt"


def format_address(host: HostAddress, port: PortNumber) -> NodeAddress:
    """``host:port``, bracketing IPv6 literals."""
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def _certs_query(certs_dir: Path | str) -> str:
    return urlencode({"certs": str(certs_dir)}, safe="/")


@dataclass(frozen=True, slots=True)
class StoreEndpoint:
    """Parsed connection target for one node."""

    scheme: str
    principal: Principal
    host: HostAddress
    port: PortNumber
    certs_dir: Path | None = None

    @property
    def secure(self) -> bool:
        return self.scheme in SECURE_SCHEMES

    @property
    def address(self) -> NodeAddress:
        return format_address(self.host, self.port)

    @property
    def websocket_url(self) -> str:
        protocol = "wss" if self.secure else "ws"
        return f"{protocol}://{self.address}"

    def ssl_context(self) -> ssl.SSLContext | None:
        """TLS context for secure schemes, trusting the cluster CA if present."""
        if not self.secure:
            return None
        cafile = None
        if self.certs_dir is not None and (self.certs_dir / CA_CERT_NAME).exists():
            cafile = str(self.certs_dir / CA_CERT_NAME)
        return ssl.create_default_context(cafile=cafile)

    def __str__(self) -> str:
        url = f"{self.scheme}://{quote(self.principal)}@{self.address}"
        if self.certs_dir is not None:
            url += f"?{_certs_query(self.certs_dir)}"
        return url


def build_endpoint(
    address: NodeAddress,
    certs_dir: Path | str,
    principal: Principal = ADMIN_PRINCIPAL,
    scheme: str = DEFAULT_SCHEME,
) -> EndpointURL:
    """Endpoint URL for talking to the node at ``address``."""
    return f"{scheme}://{quote(principal)}@{address}?{_certs_query(certs_dir)}"


def parse_endpoint(url: EndpointURL) -> StoreEndpoint:
    """Parse an endpoint URL, raising ``SetupError`` if it is unusable."""
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    if scheme not in SECURE_SCHEMES | INSECURE_SCHEMES:
        raise SetupError(f"unsupported scheme {parts.scheme!r} in {url!r}")
    if not parts.username:
        raise SetupError(f"endpoint {url!r} does not name a principal")
    try:
        port = parts.port
    except ValueError as e:
        raise SetupError(f"endpoint {url!r} has an invalid port") from e
    if not parts.hostname or port is None:
        raise SetupError(f"endpoint {url!r} must include host and port")

    certs = parse_qs(parts.query).get("certs")
    return StoreEndpoint(
        scheme=scheme,
        principal=unquote(parts.username),
        host=parts.hostname,
        port=port,
        certs_dir=Path(certs[0]) if certs else None,
    )
