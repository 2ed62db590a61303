"""
Queue poller: concurrent fan-out over configured server groups.

Each cycle launches one task per ServerGroup and waits for all of them.
A group's failure is reported through the accumulator and never touches
its siblings; the cycle itself always completes.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Iterable, Mapping

from loguru import logger

from mqdepth.datastructures.type_aliases import (
    DurationSeconds,
    FieldName,
    MeasurementName,
    QueueLength,
)

from .accumulator import Accumulator
from .address import redact_address, resolve_address
from .config import PollerSettings
from .defaults import DEFAULT_TIMEOUT, LENGTH_FIELD, MEASUREMENT_NAME
from .errors import ConfigurationError, MQDepthError
from .keys import derive_tags
from .model import PollFailure, PollSummary, QueueTags, ServerGroup
from .session import Connector, ProtocolSession, open_stream

poller_log = logger


class _CycleRecorder:
    """Forwards to the real accumulator while counting one cycle's output."""

    def __init__(self, accumulator: Accumulator) -> None:
        self._accumulator = accumulator
        self.measurements = 0
        self.failures = 0

    def add_fields(
        self,
        measurement: MeasurementName,
        fields: Mapping[FieldName, QueueLength],
        tags: QueueTags,
    ) -> None:
        self.measurements += 1
        self._accumulator.add_fields(measurement, fields, tags)

    def add_error(self, failure: PollFailure) -> None:
        self.failures += 1
        poller_log.warning(
            "Polling {} (db {}) failed: {}: {}",
            redact_address(failure.group.server),
            failure.group.db,
            failure.error_type,
            failure.error,
        )
        self._accumulator.add_error(failure)


class QueuePoller:
    """Polls queue lengths for a fixed set of server groups."""

    def __init__(
        self,
        groups: Iterable[ServerGroup],
        *,
        timeout: DurationSeconds = DEFAULT_TIMEOUT,
        connector: Connector = open_stream,
    ) -> None:
        self.groups = tuple(groups)
        self.timeout = timeout
        self._connector = connector

    @classmethod
    def from_settings(
        cls, settings: PollerSettings, *, connector: Connector = open_stream
    ) -> QueuePoller:
        return cls(settings.groups, timeout=settings.timeout, connector=connector)

    async def poll_all(self, accumulator: Accumulator) -> PollSummary:
        """Poll every group concurrently and wait for all of them."""
        started = time.monotonic()
        recorder = _CycleRecorder(accumulator)

        tasks = [
            asyncio.create_task(self._run_group(group, recorder))
            for group in self.groups
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        for group, result in zip(self.groups, results):
            if isinstance(result, BaseException):
                recorder.add_error(PollFailure(group=group, error=result))

        summary = PollSummary(
            groups=len(self.groups),
            measurements=recorder.measurements,
            failures=recorder.failures,
            elapsed_seconds=time.monotonic() - started,
        )
        poller_log.info(
            "Polled {} group(s): {} measurement(s), {} failure(s) in {:.3f}s",
            summary.groups,
            summary.measurements,
            summary.failures,
            summary.elapsed_seconds,
        )
        return summary

    def gather(self, accumulator: Accumulator) -> PollSummary:
        """Blocking entry point for hosts that are not running an event loop."""
        return asyncio.run(self.poll_all(accumulator))

    async def poll_group(self, group: ServerGroup, accumulator: Accumulator) -> int:
        """Measure every queue of one group, in configured order.

        Each reply is forwarded as soon as it is read. Returns the number of
        measurements emitted.

        Raises:
            MQDepthError: On the first failure; remaining queues of the group
                are not measured.
        """
        if not group.keys:
            raise ConfigurationError(
                f"key name is invalid: no queues configured for "
                f"'{redact_address(group.server)}' (db {group.db})"
            )

        address = resolve_address(group.server)
        session = await ProtocolSession.open(
            address, timeout=self.timeout, connector=self._connector
        )
        emitted = 0
        async with session:
            await session.authenticate(address.password)
            await session.select_database(group.db)
            for queue_name in group.keys:
                reply = await session.measure_queue(queue_name)
                fields = {LENGTH_FIELD: reply.length} if reply.has_length else {}
                accumulator.add_fields(
                    MEASUREMENT_NAME,
                    fields,
                    derive_tags(queue_name, group.db, address.redis_addr),
                )
                emitted += 1
        return emitted

    async def _run_group(self, group: ServerGroup, recorder: _CycleRecorder) -> None:
        try:
            await self.poll_group(group, recorder)
        except MQDepthError as e:
            recorder.add_error(PollFailure(group=group, error=e))
