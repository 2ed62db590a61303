"""
Data model for queue polling.

A ServerGroup is one configured polling target. Each cycle turns the
queues of every group into Measurements, or into a PollFailure when the
group cannot be polled.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from mqdepth.datastructures.type_aliases import (
    DatabaseIndex,
    DurationSeconds,
    FieldName,
    MeasurementName,
    QueueLength,
    QueueName,
    ServerAddress,
    Timestamp,
)

from .address import redact_address
from .defaults import DEFAULT_DATABASE, LENGTH_FIELD, MEASUREMENT_NAME


@dataclass(frozen=True, slots=True)
class ServerGroup:
    """One server/database pair and the queues to measure on it."""

    server: ServerAddress
    db: DatabaseIndex = DEFAULT_DATABASE
    keys: tuple[QueueName, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"server": self.server, "db": self.db, "keys": list(self.keys)}


@dataclass(frozen=True, slots=True)
class QueueTags:
    """Tags attached to every queue measurement."""

    key: str
    real_key: str
    db: str
    redis_addr: str

    def as_dict(self) -> dict[str, str]:
        return {
            "key": self.key,
            "real_key": self.real_key,
            "db": self.db,
            "redis_addr": self.redis_addr,
        }


# backslash must come first
_TAG_SPECIAL = "\\,= "
_MEASUREMENT_SPECIAL = ", "


def _escape_line_protocol(value: str, special: str) -> str:
    for char in special:
        value = value.replace(char, f"\\{char}")
    return value


@dataclass(frozen=True, slots=True)
class Measurement:
    """One emitted data point for one queue."""

    fields: Mapping[FieldName, QueueLength]
    tags: QueueTags
    name: MeasurementName = MEASUREMENT_NAME
    timestamp: Timestamp = field(default_factory=time.time)

    @property
    def length(self) -> QueueLength | None:
        return self.fields.get(LENGTH_FIELD)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "fields": dict(self.fields),
            "tags": self.tags.as_dict(),
            "timestamp": self.timestamp,
        }

    def to_line_protocol(self) -> str | None:
        """Render as InfluxDB line protocol.

        Returns None for a measurement without fields, which line protocol
        cannot express.
        """
        if not self.fields:
            return None
        # Empty tag values are not valid line protocol and are dropped.
        tag_part = "".join(
            f",{_escape_line_protocol(key, _TAG_SPECIAL)}"
            f"={_escape_line_protocol(value, _TAG_SPECIAL)}"
            for key, value in sorted(self.tags.as_dict().items())
            if value
        )
        field_part = ",".join(
            f"{_escape_line_protocol(key, _TAG_SPECIAL)}={value}i"
            for key, value in sorted(self.fields.items())
        )
        name = _escape_line_protocol(self.name, _MEASUREMENT_SPECIAL)
        return f"{name}{tag_part} {field_part} {int(self.timestamp * 1_000_000_000)}"


@dataclass(frozen=True, slots=True)
class PollFailure:
    """An error attributed to the server group that produced it."""

    group: ServerGroup
    error: BaseException

    @property
    def error_type(self) -> str:
        return type(self.error).__name__

    def to_dict(self) -> dict[str, Any]:
        return {
            "server": redact_address(self.group.server),
            "db": self.group.db,
            "error_type": self.error_type,
            "message": str(self.error),
        }


@dataclass(frozen=True, slots=True)
class PollSummary:
    """Counts for one completed polling cycle."""

    groups: int
    measurements: int
    failures: int
    elapsed_seconds: DurationSeconds

    @property
    def succeeded(self) -> bool:
        return self.failures == 0
