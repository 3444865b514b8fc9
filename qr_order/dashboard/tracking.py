"""
Client-side order tracking: new pending orders and critical alert episodes
"""
from datetime import datetime
from typing import Iterable, List, Optional, Set, Tuple

from qr_order.dashboard.urgency import UrgencyTier, urgency_tier
from qr_order.schemas.order import OrderResponse


class NewOrderDetector:
    """
    Diff successive pending-id snapshots

    The first snapshot only sets the baseline, so orders already pending when
    the dashboard opens never trigger a notification.
    """

    def __init__(self):
        self.known: Set[str] = set()
        self.initialized = False

    def reset(self) -> None:
        self.known = set()
        self.initialized = False

    def observe(self, orders: Iterable[OrderResponse]) -> List[str]:
        """Return ids pending now but not in the previous snapshot"""
        current = [o.id for o in orders if o.status == "pending"]
        if not self.initialized:
            self.known = set(current)
            self.initialized = True
            return []

        new_ids = [order_id for order_id in current if order_id not in self.known]
        self.known = set(current)
        return new_ids


class CriticalAlertTracker:
    """
    One looping alert per critical episode

    An episode starts when a pending order reaches the critical tier and ends
    when the order leaves pending, drops out of the list or falls below the
    critical tier. A new episode may start afterwards.
    """

    def __init__(self, warning_after: Optional[float] = None, critical_after: Optional[float] = None):
        self.alerting: Set[str] = set()
        self.warning_after = warning_after
        self.critical_after = critical_after

    def update(self, orders: Iterable[OrderResponse], now: datetime) -> Tuple[List[str], List[str]]:
        """Return (started, stopped) order ids for this tick"""
        critical = set()
        for order in orders:
            tier = urgency_tier(
                order.created_at,
                now,
                status=order.status,
                warning_after=self.warning_after,
                critical_after=self.critical_after,
            )
            if tier is UrgencyTier.CRITICAL:
                critical.add(order.id)

        started = sorted(critical - self.alerting)
        stopped = sorted(self.alerting - critical)
        self.alerting = critical
        return started, stopped
