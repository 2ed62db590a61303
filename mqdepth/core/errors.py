"""
Error taxonomy for mqdepth.

Every failure a polling cycle can report derives from MQDepthError so the
poller can attribute it to the server group that produced it without
catching unrelated exceptions.
"""

from __future__ import annotations


class MQDepthError(Exception):
    """Base exception for queue polling errors."""

    pass


class ConfigurationError(MQDepthError):
    """Raised when a server group or configuration file is invalid."""

    pass


class AddressResolutionError(MQDepthError):
    """Raised when a server address cannot be parsed."""

    pass


class ServerConnectionError(MQDepthError):
    """Raised when the server cannot be reached."""

    pass


class ServerTimeoutError(ServerConnectionError):
    """Raised when connecting or the session deadline times out."""

    pass


class AuthenticationError(MQDepthError):
    """Raised when the server rejects the AUTH command."""

    def __init__(self, server_message: str) -> None:
        super().__init__(server_message)
        self.server_message = server_message


class ProtocolError(MQDepthError):
    """Raised for malformed or error replies and broken reads."""

    pass
