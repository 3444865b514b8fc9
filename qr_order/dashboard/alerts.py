"""
Dashboard alert effects

The dashboard only decides *when* to alert; playing sound or vibrating a
device is left to a Notifier. LoggingNotifier writes every effect to the log,
which is what the console runner uses.
"""
import logging
from typing import List, Sequence

logger = logging.getLogger(__name__)

VIBRATION_PATTERN = (120, 80, 120)


class Notifier:
    """Base notifier; subclasses override the effects they support"""

    def __init__(self, sound_enabled: bool = False):
        self.sound_enabled = sound_enabled

    def play_new_order_sound(self) -> None:
        pass

    def vibrate(self, pattern: Sequence[int]) -> None:
        pass

    def highlight(self, order_ids: List[str]) -> None:
        pass

    def start_critical_alert(self, order_id: str) -> None:
        pass

    def stop_critical_alert(self, order_id: str) -> None:
        pass

    def show_error(self, message: str) -> None:
        pass

    def notify_new_orders(self, order_ids: List[str]) -> None:
        """One-shot notification for newly seen pending orders"""
        if not order_ids:
            return
        if self.sound_enabled:
            self.play_new_order_sound()
        self.vibrate(VIBRATION_PATTERN)
        self.highlight(order_ids)


class LoggingNotifier(Notifier):
    """Console mode: every effect becomes a log line"""

    def play_new_order_sound(self) -> None:
        logger.info("New order sound")

    def vibrate(self, pattern: Sequence[int]) -> None:
        logger.debug("Vibrate %s", list(pattern))

    def highlight(self, order_ids: List[str]) -> None:
        logger.info("New order(s): %s", ", ".join(order_ids))

    def start_critical_alert(self, order_id: str) -> None:
        # Critical alerts ignore the sound preference
        logger.warning("Order %s is waiting too long, alert started", order_id)

    def stop_critical_alert(self, order_id: str) -> None:
        logger.info("Alert for order %s stopped", order_id)

    def show_error(self, message: str) -> None:
        logger.error("Dashboard error: %s", message)
