"""
Echo Service Example

Two components on one bus: one answers "Echo" calls, the other calls it.
"""
import asyncio

from eventfetch import AsyncEventBus, EventFetch, FetchTimeoutError, LoggingHandler, configure_logging
from eventfetch.core.config import LogConfig


async def main():
    configure_logging(LogConfig(level="INFO", structured=False))

    bus = AsyncEventBus()
    LoggingHandler().attach(bus)

    server = EventFetch("echo-server", bus=bus)
    client = EventFetch("client", bus=bus)

    async def echo(request):
        await asyncio.sleep(0.01)
        return {"echo": request.data}

    server.respond("Echo", echo)

    response = await client.call("Echo", {"n": 1}, "echo-server")
    print(f"Answered by {response.user_info.replier_id}: {response.data}")

    try:
        await client.call("Missing", {}, "echo-server", timeout=0.2)
    except FetchTimeoutError as e:
        print(f"Call failed: {e.to_dict()}")


if __name__ == "__main__":
    asyncio.run(main())
