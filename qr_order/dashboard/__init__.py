"""
Admin dashboard synchronization client
"""
from qr_order.dashboard.alerts import Notifier, LoggingNotifier
from qr_order.dashboard.client import ApiError, OrdersApiClient
from qr_order.dashboard.commands import StatusUpdateCommand
from qr_order.dashboard.sync import DashboardState, DashboardSync
from qr_order.dashboard.tracking import CriticalAlertTracker, NewOrderDetector
from qr_order.dashboard.urgency import UrgencyTier, urgency_tier

__all__ = [
    "Notifier",
    "LoggingNotifier",
    "ApiError",
    "OrdersApiClient",
    "StatusUpdateCommand",
    "DashboardState",
    "DashboardSync",
    "CriticalAlertTracker",
    "NewOrderDetector",
    "UrgencyTier",
    "urgency_tier"
]
