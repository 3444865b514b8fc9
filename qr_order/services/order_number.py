"""
Order number generation

Two formats are supported:

- ``short``: ``ORD-YYYYMMDD-XXXXXX`` with a 6 character URL-safe random code
- ``daily``: ``YYYYMMDD-NNNN`` with a 4 digit random decimal suffix

Numbers are random, not sequential. Uniqueness is enforced by the store and
collisions are retried by the caller.
"""
import re
import secrets
import string
from datetime import datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from qr_order.config import settings

SHORT_CODE_ALPHABET = string.ascii_letters + string.digits + "_-"
SHORT_CODE_LENGTH = 6
DAILY_SUFFIX_DIGITS = 4

ORDER_NO_PATTERNS = {
    "short": re.compile(r"^ORD-\d{8}-[A-Za-z0-9_-]{6}$"),
    "daily": re.compile(r"^\d{8}-\d{4}$"),
}


class OrderNumberGenerator:
    """Builds candidate order numbers from the current date and a random suffix"""

    def __init__(
        self,
        fmt: Optional[str] = None,
        timezone: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.fmt = fmt or settings.ORDER_NO_FORMAT
        if self.fmt not in ORDER_NO_PATTERNS:
            raise ValueError(f"Unknown order number format: {self.fmt}")
        tz_name = timezone if timezone is not None else settings.ORDER_NO_TIMEZONE
        self.tz = ZoneInfo(tz_name) if tz_name else None
        self.clock = clock or self._now

    def _now(self) -> datetime:
        if self.tz is None:
            return datetime.now().astimezone()
        return datetime.now(self.tz)

    def date_prefix(self) -> str:
        return self.clock().strftime("%Y%m%d")

    def random_suffix(self) -> str:
        if self.fmt == "daily":
            return f"{secrets.randbelow(10 ** DAILY_SUFFIX_DIGITS):0{DAILY_SUFFIX_DIGITS}d}"
        return "".join(secrets.choice(SHORT_CODE_ALPHABET) for _ in range(SHORT_CODE_LENGTH))

    def generate(self) -> str:
        """Return a fresh candidate order number"""
        if self.fmt == "daily":
            return f"{self.date_prefix()}-{self.random_suffix()}"
        return f"ORD-{self.date_prefix()}-{self.random_suffix()}"

    @property
    def pattern(self) -> re.Pattern:
        return ORDER_NO_PATTERNS[self.fmt]
