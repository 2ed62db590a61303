"""
Accumulator interface for emitted measurements.

The poller never stores results itself; it hands every measurement and
every group failure to an accumulator. Group tasks run concurrently, so
implementations must accept calls from several of them at once.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from threading import RLock
from typing import Protocol, runtime_checkable

from mqdepth.datastructures.type_aliases import (
    FieldName,
    MeasurementName,
    QueueLength,
)

from .model import Measurement, PollFailure, QueueTags


@runtime_checkable
class Accumulator(Protocol):
    """Receives measurements and non-fatal errors from a polling cycle."""

    def add_fields(
        self,
        measurement: MeasurementName,
        fields: Mapping[FieldName, QueueLength],
        tags: QueueTags,
    ) -> None: ...

    def add_error(self, failure: PollFailure) -> None: ...


@dataclass(slots=True)
class MemoryAccumulator:
    """Thread-safe accumulator that keeps everything in memory."""

    _measurements: list[Measurement] = field(default_factory=list)
    _failures: list[PollFailure] = field(default_factory=list)
    _lock: RLock = field(default_factory=RLock)

    def add_fields(
        self,
        measurement: MeasurementName,
        fields: Mapping[FieldName, QueueLength],
        tags: QueueTags,
    ) -> None:
        point = Measurement(fields=dict(fields), tags=tags, name=measurement)
        with self._lock:
            self._measurements.append(point)

    def add_error(self, failure: PollFailure) -> None:
        with self._lock:
            self._failures.append(failure)

    @property
    def measurements(self) -> list[Measurement]:
        with self._lock:
            return list(self._measurements)

    @property
    def failures(self) -> list[PollFailure]:
        with self._lock:
            return list(self._failures)

    def field_count(self) -> int:
        """Number of fields across all measurements."""
        with self._lock:
            return sum(len(point.fields) for point in self._measurements)

    def clear(self) -> None:
        with self._lock:
            self._measurements.clear()
            self._failures.clear()
