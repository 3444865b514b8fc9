"""
Admin authentication - single shared password, trust-on-presence cookie
"""
import hmac
from typing import Mapping, Optional

from qr_order.config import settings


ADMIN_COOKIE_VALUE = "1"
LOGIN_PATH = "/admin/login"


class AdminAuthService:
    """Password check and cookie inspection for the admin area"""

    def __init__(self, password: Optional[str] = None, cookie_name: Optional[str] = None):
        self.password = settings.ADMIN_PASSWORD if password is None else password
        self.cookie_name = cookie_name or settings.ADMIN_COOKIE_NAME

    def verify_password(self, candidate: str) -> bool:
        """An empty candidate or an unconfigured password never matches"""
        if not candidate or not self.password:
            return False
        return hmac.compare_digest(candidate.encode("utf-8"), self.password.encode("utf-8"))

    def is_authenticated(self, cookies: Mapping[str, str]) -> bool:
        return cookies.get(self.cookie_name) == ADMIN_COOKIE_VALUE

    def cookie_kwargs(self) -> dict:
        return {
            "key": self.cookie_name,
            "httponly": True,
            "samesite": "lax",
            "secure": settings.ADMIN_COOKIE_SECURE,
            "path": "/",
        }


def is_login_path(path: str) -> bool:
    return path == LOGIN_PATH or path.startswith(LOGIN_PATH + "/")


def is_admin_path(path: str) -> bool:
    return path == "/admin" or path.startswith("/admin/")
