#!/usr/bin/env python3
"""Poll two in-process fake redis servers and print their queue lengths."""

import asyncio

from mqdepth import MemoryAccumulator, QueuePoller, ServerGroup

QUEUES = {b"jobs_1": 21561, b"jobs_2": 4, b"mail": 2}


async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
    while line := await reader.readline():
        name, *args = line.split()
        if name.upper() == b"LLEN":
            writer.write(b":%d\r\n" % QUEUES.get(args[0], 0))
        else:
            writer.write(b"+OK\r\n")
        await writer.drain()
    writer.close()


async def main():
    print("🚀 mqdepth demo")
    print("=" * 30)

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]

    async with server:
        poller = QueuePoller(
            [
                ServerGroup(
                    server=f"tcp://127.0.0.1:{port}",
                    db=0,
                    keys=("jobs_1", "jobs_2", "mail"),
                ),
                # Nothing listens here; reported as a failure
                ServerGroup(server="tcp://127.0.0.1:1", keys=("jobs_1",)),
            ],
            timeout=2.0,
        )
        accumulator = MemoryAccumulator()
        summary = await poller.poll_all(accumulator)

    for measurement in accumulator.measurements:
        print(f"✅ {measurement.to_line_protocol()}")
    for failure in accumulator.failures:
        print(f"❌ {failure.group.server}: {failure.error_type}: {failure.error}")

    print(
        f"\n🎉 {summary.measurements} measurement(s) "
        f"in {summary.elapsed_seconds:.3f}s"
    )


if __name__ == "__main__":
    asyncio.run(main())
