"""Queue key naming: shard suffixes and measurement tags."""

from __future__ import annotations

from mqdepth.datastructures.type_aliases import DatabaseIndex, QueueName

from .model import QueueTags

SHARD_SEPARATOR = "_"


def has_shard_suffix(name: QueueName) -> bool:
    """True when ``name`` ends with ``_`` followed by one or more digits."""
    index = len(name)
    while index > 0 and "0" <= name[index - 1] <= "9":
        index -= 1
    return index < len(name) and index > 0 and name[index - 1] == SHARD_SEPARATOR


def logical_key(name: QueueName) -> QueueName:
    """Strip a trailing shard suffix: ``queue_123`` -> ``queue``."""
    if not has_shard_suffix(name):
        return name
    return name[: name.rindex(SHARD_SEPARATOR)]


def derive_tags(
    name: QueueName, db: DatabaseIndex, redis_addr: str
) -> QueueTags:
    return QueueTags(
        key=logical_key(name),
        real_key=name,
        db=str(db),
        redis_addr=redis_addr,
    )
