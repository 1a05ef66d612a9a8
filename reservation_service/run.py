"""Service startup and main entry point.

Starts the background expiry scheduler. The HTTP transport and the message
transport attach to the wired ReservationApplication components.
"""

import asyncio

from reservation_service.bootstrap import build_application
from reservation_service.config import load_settings
from reservation_service.logging import get_logger, setup_logging


async def main() -> None:
    """Initialize components and run until stopped."""
    settings = load_settings()
    setup_logging(settings.log_level)
    logger = get_logger(__name__)

    logger.info(
        "Starting room reservation service",
        app_name=settings.app_name,
        environment=settings.environment,
        payment_update_topic=settings.payment_update_topic,
    )

    app = build_application(settings)
    await app.connect()

    app.start_scheduler()

    try:
        await asyncio.Event().wait()
    except (KeyboardInterrupt, SystemExit, asyncio.CancelledError):
        logger.info("Shutting down room reservation service")
    finally:
        await app.close()


if __name__ == "__main__":
    asyncio.run(main())
