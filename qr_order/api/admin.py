"""
Admin API endpoints - login, logout and the order stop flag
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from qr_order.api.deps import get_auth_service, get_stop_flag_service, require_admin
from qr_order.config import settings
from qr_order.services.auth_service import ADMIN_COOKIE_VALUE, AdminAuthService
from qr_order.services.stop_flag_service import StopFlagService
from qr_order.schemas.admin import (
    LoginRequest,
    LoginStatusResponse,
    StopUpdate,
    StopStatusResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/login", summary="Admin login")
def login(
    credentials: LoginRequest,
    response: Response,
    auth: AdminAuthService = Depends(get_auth_service)
):
    """
    Check the admin password and set the admin cookie (valid 7 days)

    - **password**: Admin password
    """
    if not auth.verify_password(credentials.password):
        logger.warning("Rejected admin login attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid password"
        )

    response.set_cookie(
        value=ADMIN_COOKIE_VALUE,
        max_age=settings.ADMIN_COOKIE_MAX_AGE,
        **auth.cookie_kwargs()
    )
    return {"ok": True}


@router.get("/login", response_model=LoginStatusResponse, summary="Check admin session")
def login_status(
    request: Request,
    auth: AdminAuthService = Depends(get_auth_service)
):
    """Report whether the request carries the admin cookie"""
    return LoginStatusResponse(authenticated=auth.is_authenticated(request.cookies))


@router.post("/logout", summary="Admin logout")
def logout(
    response: Response,
    auth: AdminAuthService = Depends(get_auth_service)
):
    """Clear the admin cookie"""
    response.set_cookie(value="", max_age=0, **auth.cookie_kwargs())
    return {"ok": True}


@router.get("/stop", response_model=StopStatusResponse, summary="Read order stop flag")
def get_stop(service: StopFlagService = Depends(get_stop_flag_service)):
    """Current stop flag; false when never set"""
    return StopStatusResponse(stopped=service.is_stopped())


@router.post(
    "/stop",
    response_model=StopStatusResponse,
    dependencies=[Depends(require_admin)],
    summary="Set order stop flag"
)
def set_stop(
    stop_data: StopUpdate,
    service: StopFlagService = Depends(get_stop_flag_service)
):
    """
    Start or stop accepting new orders

    - **stopped**: true rejects new orders until set back to false
    """
    return StopStatusResponse(stopped=service.set_stopped(stop_data.stopped))
