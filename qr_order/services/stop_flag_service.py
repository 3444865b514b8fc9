"""
Order stop flag - store-backed switch shared by every service instance
"""
import logging
from sqlalchemy.orm import Session

from qr_order.repositories.settings_repository import SettingsRepository

logger = logging.getLogger(__name__)

ORDER_STOP_KEY = "order_stop"


class StopFlagService:
    """Reads and writes the global order stop flag"""

    def __init__(self, db: Session):
        self.repository = SettingsRepository(db)

    def is_stopped(self) -> bool:
        """Current flag value; a missing row means ordering is open"""
        value = self.repository.get(ORDER_STOP_KEY)
        if value is None:
            return False
        return bool(value.get("stopped", False))

    def set_stopped(self, stopped: bool) -> bool:
        value = self.repository.upsert(ORDER_STOP_KEY, {"stopped": bool(stopped)})
        logger.info("Order stop flag set to %s", value.get("stopped"))
        return bool(value.get("stopped", False))
