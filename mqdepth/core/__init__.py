"""
mqdepth core

Protocol session, reply parsing, and the concurrent queue poller, plus the
configuration, accumulator, and logging pieces they rely on.
"""

from .accumulator import Accumulator, MemoryAccumulator
from .address import ResolvedAddress, redact_address, resolve_address
from .config import PollerSettings, load_settings, settings_from_dict
from .defaults import DEFAULT_PORT, DEFAULT_TIMEOUT, MEASUREMENT_NAME
from .errors import (
    AddressResolutionError,
    AuthenticationError,
    ConfigurationError,
    MQDepthError,
    ProtocolError,
    ServerConnectionError,
    ServerTimeoutError,
)
from .keys import derive_tags, logical_key
from .logging import configure_logging
from .model import Measurement, PollFailure, PollSummary, QueueTags, ServerGroup
from .poller import QueuePoller
from .protocol import Reply, encode_command, parse_reply
from .session import ProtocolSession, open_stream

__all__ = [
    "Accumulator",
    "AddressResolutionError",
    "AuthenticationError",
    "ConfigurationError",
    "DEFAULT_PORT",
    "DEFAULT_TIMEOUT",
    "MEASUREMENT_NAME",
    "MQDepthError",
    "Measurement",
    "MemoryAccumulator",
    "PollFailure",
    "PollSummary",
    "PollerSettings",
    "ProtocolError",
    "ProtocolSession",
    "QueuePoller",
    "QueueTags",
    "Reply",
    "ResolvedAddress",
    "ServerConnectionError",
    "ServerGroup",
    "ServerTimeoutError",
    "configure_logging",
    "derive_tags",
    "encode_command",
    "load_settings",
    "logical_key",
    "open_stream",
    "parse_reply",
    "redact_address",
    "resolve_address",
    "settings_from_dict",
]
