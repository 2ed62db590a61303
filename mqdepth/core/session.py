"""
Protocol session: one short-lived connection to one server.

A session is opened, authenticated, pointed at a database, and then asked
for queue lengths one at a time. The protocol is strictly request/reply:
each command's reply line is consumed before the next command is sent.

Timing model:
- Connecting is bounded by the session timeout.
- Once connected, a single wall-clock deadline (connect time + timeout) is
  fixed. Every later write and read gets only the time left until that
  deadline; there is no per-read timeout that resets.

Error Handling:
- Dial failures raise ServerConnectionError
- Connect timeouts and deadline expiry raise ServerTimeoutError
- Broken reads/writes and bad replies raise ProtocolError
- A rejected AUTH raises AuthenticationError
- After any error the session refuses further commands; close() is always
  safe and idempotent.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Coroutine
from types import TracebackType
from typing import Any, Protocol

from loguru import logger

from mqdepth.datastructures.type_aliases import (
    DatabaseIndex,
    DurationSeconds,
    QueueName,
)

from .address import ResolvedAddress
from .defaults import DEFAULT_READ_LIMIT, DEFAULT_TIMEOUT
from .errors import (
    AuthenticationError,
    MQDepthError,
    ProtocolError,
    ServerConnectionError,
    ServerTimeoutError,
)
from .protocol import Reply, encode_command, parse_reply, parse_status

session_log = logger


class Connector(Protocol):
    """Dials a resolved address and returns a stream pair."""

    def __call__(
        self, address: ResolvedAddress, *, limit: int
    ) -> Coroutine[Any, Any, tuple[asyncio.StreamReader, asyncio.StreamWriter]]: ...


async def open_stream(
    address: ResolvedAddress, *, limit: int = DEFAULT_READ_LIMIT
) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    """Open a tcp or unix-domain stream to ``address``."""
    if address.is_unix:
        return await asyncio.open_unix_connection(address.path, limit=limit)
    return await asyncio.open_connection(address.host, address.port, limit=limit)


class ProtocolSession:
    """One connection's worth of protocol exchange.

    Use ``ProtocolSession.open`` to connect; use the session as an async
    context manager so the connection is released on every exit path.
    """

    def __init__(
        self,
        address: ResolvedAddress,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        *,
        deadline: float,
    ) -> None:
        self.address = address
        self._reader = reader
        self._writer = writer
        self._deadline = deadline
        self._selected = False
        self._broken = False
        self._closed = False

    @classmethod
    async def open(
        cls,
        address: ResolvedAddress,
        *,
        timeout: DurationSeconds = DEFAULT_TIMEOUT,
        connector: Connector = open_stream,
    ) -> ProtocolSession:
        """Connect to ``address`` and fix the session deadline."""
        try:
            reader, writer = await asyncio.wait_for(
                connector(address, limit=DEFAULT_READ_LIMIT), timeout=timeout
            )
        except TimeoutError:
            raise ServerTimeoutError(
                f"Timed out connecting to redis server '{address.redis_addr}'"
            ) from None
        except OSError as e:
            raise ServerConnectionError(
                f"Unable to connect to redis server '{address.redis_addr}': {e}"
            ) from e

        deadline = asyncio.get_running_loop().time() + timeout
        session_log.debug("Connected to {}", address.redis_addr)
        return cls(address, reader, writer, deadline=deadline)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def usable(self) -> bool:
        return not (self._broken or self._closed)

    async def __aenter__(self) -> ProtocolSession:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def authenticate(self, password: str | None) -> None:
        """Send AUTH when a password is configured.

        Raises:
            AuthenticationError: If the reply is not a ``+`` status; the
                message is the server's text after the marker.
        """
        if not password:
            return
        line = await self._exchange("AUTH", password)
        ok, text = parse_status(line)
        if not ok:
            self._broken = True
            raise AuthenticationError(text)

    async def select_database(self, index: DatabaseIndex) -> None:
        """Send SELECT and discard its reply."""
        line = await self._exchange("SELECT", index)
        ok, _ = parse_status(line)
        if not ok:
            session_log.warning(
                "SELECT {} on {} replied {!r}; reply discarded",
                index,
                self.address.redis_addr,
                line.strip(),
            )
        self._selected = True

    async def measure_queue(self, queue_name: QueueName) -> Reply:
        """Ask for the length of one queue.

        Raises:
            ProtocolError: If no database has been selected yet, or the reply
                is empty or reports an error.
        """
        if not self._selected:
            raise ProtocolError("LLEN sent before SELECT completed")
        line = await self._exchange("LLEN", queue_name)
        try:
            return parse_reply(line)
        except ProtocolError:
            self._broken = True
            raise

    async def close(self) -> None:
        """Release the connection. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._writer.close()
        with contextlib.suppress(Exception):
            await self._writer.wait_closed()
        session_log.debug("Closed connection to {}", self.address.redis_addr)

    async def _exchange(self, command: str, *args: str | int) -> str:
        """Send one command and return its raw reply line."""
        if self._closed:
            raise ProtocolError(f"{command} sent on a closed session")
        if self._broken:
            raise ProtocolError(f"{command} sent on a session after an error")

        try:
            payload = encode_command(command, *args)
            self._remaining(command)
            if command == "AUTH":
                session_log.debug("-> AUTH ******** ({})", self.address.redis_addr)
            else:
                session_log.debug(
                    "-> {} ({})", payload.decode().strip(), self.address.redis_addr
                )
            await self._write(payload, command)
            line = await self._read_line(command)
        except MQDepthError:
            self._broken = True
            raise

        session_log.debug("<- {!r} ({})", line.strip(), self.address.redis_addr)
        return line

    async def _write(self, payload: bytes, command: str) -> None:
        try:
            self._writer.write(payload)
        except OSError as e:
            raise ProtocolError(f"Failed to send {command}: {e}") from e
        await self._bounded(self._writer.drain(), command)

    async def _read_line(self, command: str) -> str:
        try:
            data = await self._bounded(self._reader.readline(), command)
        except ValueError as e:
            raise ProtocolError(f"Reply to {command} is too long: {e}") from e
        if not data:
            raise ProtocolError(f"Connection closed before reply to {command}")
        return data.decode("utf-8", errors="replace")

    def _remaining(self, command: str) -> float:
        remaining = self._deadline - asyncio.get_running_loop().time()
        if remaining <= 0:
            raise ServerTimeoutError(
                f"Session deadline exceeded before {command} "
                f"({self.address.redis_addr})"
            )
        return remaining

    async def _bounded[T](self, operation: Coroutine[Any, Any, T], command: str) -> T:
        """Run an I/O step within the time left before the session deadline."""
        try:
            remaining = self._remaining(command)
        except ServerTimeoutError:
            operation.close()
            raise
        try:
            return await asyncio.wait_for(operation, timeout=remaining)
        except TimeoutError:
            raise ServerTimeoutError(
                f"Session deadline exceeded during {command} "
                f"({self.address.redis_addr})"
            ) from None
        except OSError as e:
            raise ProtocolError(f"I/O error during {command}: {e}") from e
