"""
Admin dashboard synchronization

Every refresh trigger (initial load, polling timer, returning to the
foreground, change feed events, a confirmed status update) sets one
"refresh requested" event. A single refresh loop waits on it, with the
polling interval as timeout, so fetches never run concurrently.
"""
import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

import httpx

from qr_order.config import settings
from qr_order.dashboard.alerts import LoggingNotifier, Notifier
from qr_order.dashboard.client import ApiError, OrdersApiClient
from qr_order.dashboard.commands import StatusUpdateCommand
from qr_order.dashboard.tracking import CriticalAlertTracker, NewOrderDetector
from qr_order.dashboard.urgency import UrgencyTier, urgency_tier
from qr_order.schemas.order import OrderResponse

logger = logging.getLogger(__name__)

TICK_INTERVAL = 1.0


@dataclass
class DashboardState:
    """What the dashboard currently shows"""
    orders: List[OrderResponse] = field(default_factory=list)
    pending_count: int = 0
    status_filter: Optional[str] = None
    error: Optional[str] = None
    loading: bool = True
    # None until read from the server
    stopped: Optional[bool] = None
    # order id -> monotonic time the highlight ends
    highlighted: Dict[str, float] = field(default_factory=dict)

    @property
    def pending(self) -> List[OrderResponse]:
        return [o for o in self.orders if o.status == "pending"]

    @property
    def done(self) -> List[OrderResponse]:
        return [o for o in self.orders if o.status != "pending"]


class DashboardSync:
    """Keeps DashboardState in step with the Order API"""

    def __init__(
        self,
        client: OrdersApiClient,
        notifier: Optional[Notifier] = None,
        foreground_interval: Optional[float] = None,
        background_interval: Optional[float] = None,
        feed_min_interval: Optional[float] = None,
        highlight_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.client = client
        self.notifier = notifier or LoggingNotifier()
        self.foreground_interval = foreground_interval or settings.DASHBOARD_FOREGROUND_INTERVAL
        self.background_interval = background_interval or settings.DASHBOARD_BACKGROUND_INTERVAL
        self.feed_min_interval = (
            settings.DASHBOARD_FEED_MIN_INTERVAL if feed_min_interval is None else feed_min_interval
        )
        self.highlight_seconds = (
            settings.DASHBOARD_HIGHLIGHT_SECONDS if highlight_seconds is None else highlight_seconds
        )
        self.clock = clock
        self.now = now or (lambda: datetime.now(timezone.utc))

        self.state = DashboardState()
        self.detector = NewOrderDetector()
        self.critical = CriticalAlertTracker()

        self.visible = True
        self._refresh_requested = asyncio.Event()
        self._stopping = asyncio.Event()
        self._last_feed_refresh: Optional[float] = None

    # -- triggers ---------------------------------------------------------

    @property
    def poll_interval(self) -> float:
        return self.foreground_interval if self.visible else self.background_interval

    def request_refresh(self) -> None:
        self._refresh_requested.set()

    def on_change_event(self, event: Optional[dict] = None) -> bool:
        """
        Change feed hook; requests at most one refresh per feed_min_interval

        Returns:
            True if a refresh was requested
        """
        current = self.clock()
        if self._last_feed_refresh is not None and current - self._last_feed_refresh < self.feed_min_interval:
            return False
        self._last_feed_refresh = current
        self.request_refresh()
        return True

    def set_visible(self, visible: bool) -> None:
        """Foreground polls faster and refreshes right away on return"""
        was_visible = self.visible
        self.visible = visible
        if visible and not was_visible:
            self.request_refresh()

    def set_filter(self, status: Optional[str]) -> None:
        self.state.status_filter = status or None
        self.state.loading = True
        # A different filter shows a different pending set
        self.detector.reset()
        self.request_refresh()

    # -- work -------------------------------------------------------------

    async def refresh(self) -> bool:
        """
        Fetch the current page and update state

        Returns:
            True on success; on failure the error banner text is set instead
        """
        try:
            result = await self.client.list_orders(status=self.state.status_filter)
        except (ApiError, httpx.HTTPError) as e:
            self.state.error = str(e) or "Failed to load orders"
            logger.warning("Order list refresh failed: %s", self.state.error)
            return False
        finally:
            self.state.loading = False

        if self.state.stopped is None:
            await self.load_stop_flag()

        new_ids = self.detector.observe(result.items)
        self.state.orders = list(result.items)
        self.state.pending_count = result.pending_count
        self.state.error = None

        if new_ids:
            expires = self.clock() + self.highlight_seconds
            for order_id in new_ids:
                self.state.highlighted[order_id] = expires
            self.notifier.notify_new_orders(new_ids)

        self.tick()
        return True

    def tick(self) -> None:
        """Re-evaluate urgency alerts and expire highlights"""
        started, stopped = self.critical.update(self.state.orders, self.now())
        for order_id in started:
            self.notifier.start_critical_alert(order_id)
        for order_id in stopped:
            self.notifier.stop_critical_alert(order_id)

        current = self.clock()
        for order_id, expires in list(self.state.highlighted.items()):
            if expires <= current:
                del self.state.highlighted[order_id]

    def tier_of(self, order: OrderResponse) -> UrgencyTier:
        return urgency_tier(order.created_at, self.now(), status=order.status)

    async def update_status(self, order_id: str, status: str) -> bool:
        """
        Optimistically set an order's status

        Returns:
            True if the server accepted it; otherwise the local change is
            rolled back and the error is shown
        """
        command = StatusUpdateCommand(self.state, order_id, status)
        try:
            await command.execute(self.client)
        except (ApiError, httpx.HTTPError) as e:
            self.notifier.show_error(str(e) or "Failed to update order")
            return False
        self.tick()
        self.request_refresh()
        return True

    async def load_stop_flag(self) -> bool:
        """Read the order stop flag; a failure leaves it unknown for the next refresh"""
        try:
            self.state.stopped = await self.client.get_stop()
        except (ApiError, httpx.HTTPError) as e:
            logger.warning("Stop flag read failed: %s", e)
            return False
        return True

    async def set_stopped(self, stopped: bool) -> bool:
        """
        Start or stop accepting new orders

        Returns:
            True if the server stored the flag; otherwise the error is shown
        """
        try:
            self.state.stopped = await self.client.set_stop(stopped)
        except (ApiError, httpx.HTTPError) as e:
            self.notifier.show_error(str(e) or "Failed to update ordering state")
            return False
        logger.info("Ordering %s", "stopped" if self.state.stopped else "resumed")
        self.request_refresh()
        return True

    async def reset_finished(self) -> Optional[int]:
        """
        Delete completed and cancelled orders

        Returns:
            Number of deleted orders, or None if the reset failed
        """
        try:
            deleted = await self.client.reset_orders()
        except (ApiError, httpx.HTTPError) as e:
            self.notifier.show_error(str(e) or "Failed to reset orders")
            return None
        logger.info("Reset removed %d finished orders", deleted)
        self.request_refresh()
        return deleted

    # -- loops ------------------------------------------------------------

    async def _refresh_loop(self) -> None:
        self.request_refresh()
        while not self._stopping.is_set():
            try:
                await asyncio.wait_for(self._refresh_requested.wait(), timeout=self.poll_interval)
            except asyncio.TimeoutError:
                pass
            if self._stopping.is_set():
                break
            self._refresh_requested.clear()
            await self.refresh()

    async def _tick_loop(self) -> None:
        while not self._stopping.is_set():
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=TICK_INTERVAL)
            except asyncio.TimeoutError:
                self.tick()

    async def run(self) -> None:
        """Run until stop() is called"""
        await asyncio.gather(self._refresh_loop(), self._tick_loop())

    def stop(self) -> None:
        self._stopping.set()
        self._refresh_requested.set()
