"""
mqdepth shared datastructures.

Semantic type aliases used across the core, CLI, and tests.
"""

from __future__ import annotations

from .type_aliases import (
    DatabaseIndex,
    DurationSeconds,
    FieldName,
    HostAddress,
    MeasurementName,
    PortNumber,
    QueueLength,
    QueueName,
    ServerAddress,
    SocketPath,
    TagName,
    TagValue,
)

__all__ = [
    "DatabaseIndex",
    "DurationSeconds",
    "FieldName",
    "HostAddress",
    "MeasurementName",
    "PortNumber",
    "QueueLength",
    "QueueName",
    "ServerAddress",
    "SocketPath",
    "TagName",
    "TagValue",
]
