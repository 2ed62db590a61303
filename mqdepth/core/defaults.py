"""
Centralized defaults for mqdepth.

Every component reads its fallback values from here so that the CLI,
the config loader, and the core agree on them.
"""

from __future__ import annotations

from enum import Enum

# Server addressing
DEFAULT_PORT = 6379
DEFAULT_DATABASE = 0

# One wall-clock budget per session: connect, then every command after it
DEFAULT_TIMEOUT = 5.0  # seconds

# Reply lines are short; anything longer than this is not a reply we parse
DEFAULT_READ_LIMIT = 64 * 1024  # 64KB

# Measurement emitted for every polled queue
MEASUREMENT_NAME = "redis_mq"
LENGTH_FIELD = "length"

DESCRIPTION = "Read metrics from one or many redis message queues"


class TransportScheme(Enum):
    """Stream transports a server address can select."""

    TCP = "tcp"
    UNIX = "unix"


DEFAULT_SCHEME = TransportScheme.TCP
