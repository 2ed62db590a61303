"""
Configuration for mqdepth.

Settings are plain dataclasses. Files are JSON or TOML with one entry per
server group::

    {
        "timeout": 5.0,
        "log_level": "INFO",
        "queues": [
            {"server": "tcp://localhost:6379", "db": 0, "keys": ["jobs_1"]}
        ]
    }
"""

from __future__ import annotations

import json
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from mqdepth.datastructures.type_aliases import DurationSeconds

from .defaults import DEFAULT_DATABASE, DEFAULT_TIMEOUT
from .errors import ConfigurationError
from .model import ServerGroup

# loguru's built-in levels
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")

SAMPLE_CONFIG_TOML = """\
## Server groups to poll. Each group is one connection per cycle.
##
## Servers are addresses of the form
##   [protocol://][:password@]address[:port]
## e.g.
##   tcp://localhost:6379
##   tcp://:password@192.168.99.100
##   unix:///var/run/redis.sock
##
## db is the index of the redis database, default 0.
## keys are the queues (lists) to measure. A trailing _<digits> shard
## suffix is reported separately as the logical "key" tag.
##
## log_level sets stderr logging (TRACE to CRITICAL); --verbose overrides it.
timeout = 5.0
log_level = "INFO"

[[queues]]
server = "tcp://localhost:6379"
db = 0
keys = ["queue_name1"]

[[queues]]
server = "tcp://localhost:6379"
db = 5
keys = ["queue_name2"]
"""

SAMPLE_CONFIG_JSON = json.dumps(
    {
        "timeout": DEFAULT_TIMEOUT,
        "log_level": "INFO",
        "queues": [
            {"server": "tcp://localhost:6379", "db": 0, "keys": ["queue_name1"]},
            {"server": "tcp://localhost:6379", "db": 5, "keys": ["queue_name2"]},
        ],
    },
    indent=2,
)


@dataclass(slots=True)
class PollerSettings:
    """Queue poller configuration settings."""

    groups: tuple[ServerGroup, ...] = ()
    timeout: DurationSeconds = DEFAULT_TIMEOUT
    # None leaves the level to the caller (WARNING for the CLI)
    log_level: str | None = None

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")


def _group_from_dict(index: int, entry: Any) -> ServerGroup:
    if not isinstance(entry, Mapping):
        raise ConfigurationError(f"queues[{index}] must be a table/object")

    server = entry.get("server")
    if not isinstance(server, str) or not server.strip():
        raise ConfigurationError(
            f"queues[{index}]: 'server' must be a non-empty string"
        )

    db = entry.get("db", DEFAULT_DATABASE)
    # bool is an int subclass and must be rejected explicitly
    if isinstance(db, bool) or not isinstance(db, int) or db < 0:
        raise ConfigurationError(
            f"queues[{index}]: 'db' must be a non-negative integer, got {db!r}"
        )

    keys = entry.get("keys", [])
    if not isinstance(keys, list) or not all(isinstance(key, str) for key in keys):
        raise ConfigurationError(f"queues[{index}]: 'keys' must be a list of strings")

    return ServerGroup(server=server, db=db, keys=tuple(keys))


def settings_from_dict(data: Mapping[str, Any]) -> PollerSettings:
    """Build settings from already-decoded configuration data."""
    queues = data.get("queues", [])
    if not isinstance(queues, list):
        raise ConfigurationError("'queues' must be a list")

    timeout = data.get("timeout", DEFAULT_TIMEOUT)
    if isinstance(timeout, bool) or not isinstance(timeout, int | float):
        raise ConfigurationError(f"'timeout' must be a number, got {timeout!r}")

    log_level = data.get("log_level")
    if log_level is not None:
        if not isinstance(log_level, str) or log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(
                f"'log_level' must be one of {', '.join(LOG_LEVELS)}, "
                f"got {log_level!r}"
            )
        log_level = log_level.upper()

    return PollerSettings(
        groups=tuple(_group_from_dict(i, entry) for i, entry in enumerate(queues)),
        timeout=float(timeout),
        log_level=log_level,
    )


def load_settings(path: str | Path) -> PollerSettings:
    """Load settings from a ``.json`` or ``.toml`` file.

    Raises:
        ConfigurationError: If the file is missing, unreadable, of an unknown
            type, or does not describe valid settings.
    """
    config_file = Path(path)
    suffix = config_file.suffix.lower()
    if suffix not in (".json", ".toml"):
        raise ConfigurationError(
            f"Unsupported configuration file type '{suffix}': use .json or .toml"
        )

    try:
        if suffix == ".json":
            with open(config_file) as f:
                data = json.load(f)
        else:
            with open(config_file, "rb") as f:
                data = tomllib.load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Configuration file not found: {config_file}")
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in configuration file: {e}")
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in configuration file: {e}")
    except OSError as e:
        raise ConfigurationError(f"Unable to read configuration file: {e}")

    if not isinstance(data, Mapping):
        raise ConfigurationError("Configuration root must be an object")
    return settings_from_dict(data)
