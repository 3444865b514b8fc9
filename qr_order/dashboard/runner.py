"""
Console entry point for the admin dashboard synchronizer
"""
import asyncio
import logging
import signal

import httpx

from qr_order.config import settings
from qr_order.dashboard.alerts import LoggingNotifier
from qr_order.dashboard.client import ApiError, OrdersApiClient
from qr_order.dashboard.feed import ChangeFeedSubscriber
from qr_order.dashboard.sync import DashboardSync
from qr_order.logging_config import configure_logging

logger = logging.getLogger(__name__)


async def run_dashboard() -> None:
    async with OrdersApiClient() as client:
        await client.login(settings.DASHBOARD_ADMIN_PASSWORD or settings.ADMIN_PASSWORD)

        sync = DashboardSync(
            client,
            notifier=LoggingNotifier(sound_enabled=settings.DASHBOARD_SOUND),
        )
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, sync.stop)

        feed = None
        if settings.EVENTS_ENABLED:
            feed = ChangeFeedSubscriber(sync.on_change_event, loop)
            feed.start()

        logger.info("Dashboard sync started against %s", client.base_url)
        try:
            await sync.run()
        finally:
            if feed is not None:
                feed.stop()
            try:
                await client.logout()
            except (ApiError, httpx.HTTPError) as e:
                logger.warning("Logout failed: %s", e)
            logger.info("Dashboard sync stopped")


def main() -> None:
    configure_logging()
    asyncio.run(run_dashboard())


if __name__ == "__main__":
    main()
