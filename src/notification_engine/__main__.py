"""Run the scheduling loop until SIGINT/SIGTERM: ``python -m notification_engine``."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal

from .bootstrap import build_container
from .config import NotificationSettings
from .logging_config import configure_logging

logger = logging.getLogger("notification_engine")


async def serve(settings: NotificationSettings) -> None:
    container = await build_container(settings)
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    await container.worker.start()
    try:
        await stop.wait()
    finally:
        logger.info("Shutting down")
        await container.close()


def main() -> None:
    settings = NotificationSettings()
    configure_logging(settings.log_level)
    asyncio.run(serve(settings))


if __name__ == "__main__":
    main()
