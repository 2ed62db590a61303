"""
End-to-end polling over real sockets.

A FakeRedis is served with asyncio.start_server on a tcp port and on a
unix-domain socket, and polled through the default stream connector.
"""

import asyncio
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field

import pytest
import pytest_asyncio

from mqdepth.core.accumulator import MemoryAccumulator
from mqdepth.core.errors import ServerConnectionError
from mqdepth.core.model import ServerGroup
from mqdepth.core.poller import QueuePoller
from tests.fake_redis import FakeRedis, serve_fake_redis


@dataclass(slots=True)
class SocketRedis:
    """FakeRedis behind a listening socket, counting accepted connections."""

    fake: FakeRedis
    accepted: int = 0
    finished: int = 0
    idle: asyncio.Event = field(default_factory=asyncio.Event)

    async def handle(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        self.accepted += 1
        self.idle.clear()
        try:
            await serve_fake_redis(self.fake, reader, writer)
        finally:
            self.finished += 1
            if self.finished == self.accepted:
                self.idle.set()


@pytest_asyncio.fixture
async def tcp_redis() -> AsyncGenerator[tuple[SocketRedis, int], None]:
    redis = SocketRedis(
        FakeRedis(password="pw", lists={0: {"jobs_1": 3}, 4: {"mail": 11}})
    )
    server = await asyncio.start_server(redis.handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    try:
        yield redis, port
    finally:
        server.close()
        await server.wait_closed()


@pytest_asyncio.fixture
async def unix_redis(tmp_path) -> AsyncGenerator[tuple[SocketRedis, str], None]:
    redis = SocketRedis(FakeRedis(lists={0: {"events_12": 42}}))
    path = str(tmp_path / "redis.sock")
    server = await asyncio.start_unix_server(redis.handle, path)
    try:
        yield redis, path
    finally:
        server.close()
        await server.wait_closed()


@pytest.mark.asyncio
async def test_tcp_polling(tcp_redis):
    redis, port = tcp_redis
    groups = [
        ServerGroup(server=f"tcp://:pw@127.0.0.1:{port}", db=0, keys=("jobs_1",)),
        ServerGroup(server=f"127.0.0.1:{port}", db=4, keys=("mail",)),
    ]
    accumulator = MemoryAccumulator()

    summary = await QueuePoller(groups).poll_all(accumulator)

    # the second group never authenticates; NOAUTH carries no ERR keyword
    assert summary.failures == 0
    by_key = {m.tags.real_key: m for m in accumulator.measurements}
    assert by_key["jobs_1"].length == 3
    assert by_key["jobs_1"].tags.key == "jobs"
    assert by_key["jobs_1"].tags.redis_addr == f"127.0.0.1:{port}"
    assert by_key["mail"].length is None
    assert by_key["mail"].tags.db == "4"

    await asyncio.wait_for(redis.idle.wait(), timeout=2.0)
    assert redis.accepted == redis.finished == 2


@pytest.mark.asyncio
async def test_unix_socket_polling(unix_redis):
    redis, path = unix_redis
    group = ServerGroup(server=f"unix://{path}", keys=("events_12",))
    accumulator = MemoryAccumulator()

    await QueuePoller([group]).poll_all(accumulator)

    (measurement,) = accumulator.measurements
    assert measurement.length == 42
    assert measurement.tags.key == "events"
    assert measurement.tags.redis_addr == path

    await asyncio.wait_for(redis.idle.wait(), timeout=2.0)
    assert redis.accepted == redis.finished == 1


@pytest.mark.asyncio
async def test_refused_tcp_connection():
    # Bind and release a port so nothing is listening on it.
    server = await asyncio.start_server(lambda r, w: None, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    server.close()
    await server.wait_closed()

    accumulator = MemoryAccumulator()
    group = ServerGroup(server=f"127.0.0.1:{port}", keys=("q",))
    await QueuePoller([group], timeout=1.0).poll_all(accumulator)

    (failure,) = accumulator.failures
    assert isinstance(failure.error, ServerConnectionError)
