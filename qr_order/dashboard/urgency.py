"""
Order urgency tiers derived from order age
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from qr_order.config import settings


class UrgencyTier(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


def order_age_seconds(created_at: datetime, now: datetime) -> float:
    # Naive timestamps come back from SQLite; they are stored in UTC
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return (now - created_at).total_seconds()


def urgency_tier(
    created_at: datetime,
    now: datetime,
    status: str = "pending",
    warning_after: Optional[float] = None,
    critical_after: Optional[float] = None,
) -> UrgencyTier:
    """
    Tier for an order of the given age

    Only pending orders escalate: under the warning threshold (2 minutes by
    default) is normal, under the critical threshold (3 minutes) is warning,
    anything older is critical.
    """
    if status != "pending":
        return UrgencyTier.NORMAL
    if warning_after is None:
        warning_after = settings.URGENCY_WARNING_SECONDS
    if critical_after is None:
        critical_after = settings.URGENCY_CRITICAL_SECONDS

    age = order_age_seconds(created_at, now)
    if age >= critical_after:
        return UrgencyTier.CRITICAL
    if age >= warning_after:
        return UrgencyTier.WARNING
    return UrgencyTier.NORMAL
