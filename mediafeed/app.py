from __future__ import annotations

import asyncio
import logging
import signal

from aiogram import Dispatcher

from .config import load_config
from .di import Container
from .logging_config import configure_logging
from .tg.handlers import create_router

LOGGER = logging.getLogger(__name__)


def _install_signal_handlers(dispatcher: Dispatcher) -> None:
    loop = asyncio.get_running_loop()

    def request_stop(sig: signal.Signals) -> None:
        LOGGER.info("Received signal, shutting down", extra={"signal": sig.name})
        loop.create_task(dispatcher.stop_polling())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, request_stop, sig)
        except NotImplementedError:  # pragma: no cover - Windows
            LOGGER.debug("Signal handlers are not supported on this platform")


async def main() -> None:
    config = load_config()
    configure_logging(config.logging.level, config.logging.timezone)
    container = Container(config)
    await container.provider.startup()

    dispatcher = container.dispatcher
    dispatcher.include_router(create_router(container.feeds, container.prompts))
    _install_signal_handlers(dispatcher)

    try:
        await dispatcher.start_polling(container.bot, handle_signals=False)
    finally:
        try:
            await dispatcher.storage.close()
        except Exception:  # pragma: no cover
            LOGGER.exception("Failed to close dispatcher storage")
        await container.shutdown()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
