"""
Logging setup shared by the API and the dashboard runner
"""
import logging
from typing import Optional

from qr_order.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )
    # pika is chatty at INFO
    logging.getLogger("pika").setLevel(logging.WARNING)
