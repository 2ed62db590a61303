"""
In-memory redis doubles for mqdepth tests.

FakeRedis answers the handful of inline commands the poller sends.
FakeNetwork routes dialed addresses to FakeRedis instances and counts the
connections it hands out, so tests can check that every opened connection
is closed again.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field

from mqdepth.core.address import ResolvedAddress

MAX_DATABASES = 16


@dataclass(slots=True)
class FakeRedis:
    """Scripted redis server state."""

    password: str | None = None
    lists: dict[int, dict[str, int]] = field(default_factory=dict)
    # Raw bytes written back for LLEN of a given key, replacing the real answer
    raw_replies: dict[str, bytes] = field(default_factory=dict)
    auth_reply: bytes | None = None
    silent: bool = False
    commands: list[str] = field(default_factory=list)

    def new_connection(self) -> "FakeRedisConnection":
        return FakeRedisConnection(self)


@dataclass(slots=True)
class FakeRedisConnection:
    """Per-connection protocol state of a FakeRedis."""

    server: FakeRedis
    authenticated: bool = False
    db: int = 0

    def respond(self, line: str) -> bytes | None:
        server = self.server
        server.commands.append(line)
        if server.silent:
            return None

        name, *args = line.split()
        name = name.upper()
        if name == "AUTH":
            if server.auth_reply is not None:
                return server.auth_reply
            if server.password is None:
                return b"-ERR Client sent AUTH, but no password is set\r\n"
            if args == [server.password]:
                self.authenticated = True
                return b"+OK\r\n"
            return b"-ERR invalid password\r\n"

        if server.password is not None and not self.authenticated:
            return b"-NOAUTH Authentication required.\r\n"

        if name == "SELECT":
            index = int(args[0])
            if index >= MAX_DATABASES:
                return b"-ERR DB index is out of range\r\n"
            self.db = index
            return b"+OK\r\n"

        if name == "LLEN":
            if len(args) != 1:
                return b"-ERR wrong number of arguments for 'llen' command\r\n"
            key = args[0]
            if key in server.raw_replies:
                return server.raw_replies[key]
            length = server.lists.get(self.db, {}).get(key, 0)
            return f":{length}\r\n".encode()

        return f"-ERR unknown command '{name.lower()}'\r\n".encode()


class FakeWriter:
    """Stream writer that answers each written command through a reader."""

    def __init__(
        self,
        connection: FakeRedisConnection,
        reader: asyncio.StreamReader,
        on_close: Callable[[], None],
    ) -> None:
        self._connection = connection
        self._reader = reader
        self._on_close = on_close
        self._buffer = b""
        self.closed = False

    def write(self, data: bytes) -> None:
        if self.closed:
            raise ConnectionResetError("write on closed fake connection")
        self._buffer += data
        while b"\r\n" in self._buffer:
            raw, self._buffer = self._buffer.split(b"\r\n", 1)
            reply = self._connection.respond(raw.decode())
            if reply is not None:
                self._reader.feed_data(reply)

    async def drain(self) -> None:
        return None

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._reader.feed_eof()
        self._on_close()

    async def wait_closed(self) -> None:
        return None


@dataclass(slots=True)
class FakeNetwork:
    """Connector that dials FakeRedis servers by their ``redis_addr``."""

    servers: dict[str, FakeRedis] = field(default_factory=dict)
    connect_delay: float = 0.0
    opened: int = 0
    closed: int = 0
    dialed: list[str] = field(default_factory=list)

    def add(self, redis_addr: str, server: FakeRedis | None = None) -> FakeRedis:
        server = server or FakeRedis()
        self.servers[redis_addr] = server
        return server

    @property
    def open_connections(self) -> int:
        return self.opened - self.closed

    async def __call__(
        self, address: ResolvedAddress, *, limit: int
    ) -> tuple[asyncio.StreamReader, FakeWriter]:
        self.dialed.append(address.redis_addr)
        if self.connect_delay:
            await asyncio.sleep(self.connect_delay)
        server = self.servers.get(address.redis_addr)
        if server is None:
            raise ConnectionRefusedError(111, "Connection refused")

        reader = asyncio.StreamReader(limit=limit)
        writer = FakeWriter(server.new_connection(), reader, self._mark_closed)
        self.opened += 1
        return reader, writer

    def _mark_closed(self) -> None:
        self.closed += 1


async def serve_fake_redis(
    server: FakeRedis, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
) -> None:
    """asyncio.start_server handler speaking for ``server`` over a socket."""
    connection = server.new_connection()
    try:
        while line := await reader.readline():
            reply = connection.respond(line.decode().strip())
            if reply is not None:
                writer.write(reply)
                await writer.drain()
    finally:
        writer.close()
