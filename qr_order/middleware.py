"""
Access gate for the admin area
"""
from urllib.parse import urlencode

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from qr_order.services.auth_service import LOGIN_PATH, AdminAuthService, is_admin_path, is_login_path


class AdminGateMiddleware(BaseHTTPMiddleware):
    """
    Redirect unauthenticated requests under /admin to the login page

    The login page always passes. The bare /admin path goes to the login
    page as well. Every other admin path needs the admin cookie; without it
    the request is redirected to /admin/login?next=<original path and query>.
    """

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not is_admin_path(path) or is_login_path(path):
            return await call_next(request)

        if path == "/admin":
            return RedirectResponse(LOGIN_PATH)

        if AdminAuthService().is_authenticated(request.cookies):
            return await call_next(request)

        target = path
        if request.url.query:
            target = f"{path}?{request.url.query}"
        return RedirectResponse(f"{LOGIN_PATH}?{urlencode({'next': target})}")
