"""
mqdepth - Redis message queue depth poller

Polls the length of redis lists used as message queues across any number
of servers, speaking a minimal hand-rolled subset of the redis protocol,
and emits one tagged ``redis_mq`` measurement per queue.

## Quick Start

```python
from mqdepth import MemoryAccumulator, QueuePoller, ServerGroup

poller = QueuePoller(
    [ServerGroup(server="tcp://localhost:6379", db=0, keys=("jobs_1",))]
)
accumulator = MemoryAccumulator()
await poller.poll_all(accumulator)
```
"""

from .core import (
    Accumulator,
    AddressResolutionError,
    AuthenticationError,
    ConfigurationError,
    Measurement,
    MemoryAccumulator,
    MQDepthError,
    PollerSettings,
    PollFailure,
    PollSummary,
    ProtocolError,
    ProtocolSession,
    QueuePoller,
    QueueTags,
    ServerConnectionError,
    ServerGroup,
    ServerTimeoutError,
    load_settings,
)

__version__ = "1.0.0"
__license__ = "MIT"

__all__ = [
    "Accumulator",
    "AddressResolutionError",
    "AuthenticationError",
    "ConfigurationError",
    "Measurement",
    "MemoryAccumulator",
    "MQDepthError",
    "PollFailure",
    "PollSummary",
    "PollerSettings",
    "ProtocolError",
    "ProtocolSession",
    "QueuePoller",
    "QueueTags",
    "ServerConnectionError",
    "ServerGroup",
    "ServerTimeoutError",
    "load_settings",
]
