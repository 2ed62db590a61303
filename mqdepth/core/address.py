"""
Server address resolution.

Addresses follow ``[scheme://][:password@]host[:port]`` where the scheme is
``tcp`` (the default) or ``unix``. Bare ``host`` and ``host:port`` strings
are treated as tcp addresses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import unquote, urlsplit

from mqdepth.datastructures.type_aliases import (
    HostAddress,
    PortNumber,
    ServerAddress,
    SocketPath,
)

from .defaults import DEFAULT_PORT, DEFAULT_SCHEME, TransportScheme
from .errors import AddressResolutionError


@dataclass(frozen=True, slots=True)
class ResolvedAddress:
    """A server address reduced to what is needed to dial it."""

    scheme: TransportScheme
    host: HostAddress | None = None
    port: PortNumber | None = None
    path: SocketPath | None = None
    password: str | None = field(default=None, repr=False)

    @property
    def is_unix(self) -> bool:
        return self.scheme is TransportScheme.UNIX

    @property
    def redis_addr(self) -> str:
        """Address actually dialed, as reported in the ``redis_addr`` tag."""
        if self.is_unix:
            return self.path or ""
        host = self.host or ""
        if ":" in host:
            host = f"[{host}]"
        return f"{host}:{self.port}"


def resolve_address(server: ServerAddress) -> ResolvedAddress:
    """Parse a configured server address.

    Raises:
        AddressResolutionError: If the address is empty, names an unsupported
            scheme, or has no usable host, port, or socket path.
    """
    raw = server.strip()
    if not raw:
        raise AddressResolutionError("server address is empty")
    shown = redact_address(raw)

    scheme_name, separator, _ = raw.partition("://")
    if not separator:
        raw = f"{DEFAULT_SCHEME.value}://{raw}"
        scheme = DEFAULT_SCHEME
    else:
        try:
            scheme = TransportScheme(scheme_name.lower())
        except ValueError:
            raise AddressResolutionError(
                f"Unable to parse address '{shown}': unsupported scheme "
                f"'{scheme_name}'"
            ) from None

    try:
        parts = urlsplit(raw)
        port = parts.port
    except ValueError as e:
        raise AddressResolutionError(f"Unable to parse address '{shown}': {e}")

    password = unquote(parts.password) if parts.password else None

    if scheme is TransportScheme.UNIX:
        if not parts.path:
            raise AddressResolutionError(
                f"Unable to parse address '{shown}': missing socket path"
            )
        return ResolvedAddress(scheme=scheme, path=parts.path, password=password)

    if not parts.hostname:
        raise AddressResolutionError(f"Unable to parse address '{shown}': missing host")
    if port == 0:
        raise AddressResolutionError(f"Unable to parse address '{shown}': port 0")

    return ResolvedAddress(
        scheme=scheme,
        host=parts.hostname,
        port=port if port is not None else DEFAULT_PORT,
        password=password,
    )


def redact_address(server: ServerAddress) -> ServerAddress:
    """Mask the password of a configured address for display."""
    scheme_name, separator, rest = server.partition("://")
    if not separator:
        scheme_name, rest = "", server
    userinfo, at, location = rest.rpartition("@")
    if not at or ":" not in userinfo:
        return server
    user = userinfo.split(":", 1)[0]
    prefix = f"{scheme_name}://" if separator else ""
    return f"{prefix}{user}:***@{location}"
