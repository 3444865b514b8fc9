"""
Shared API dependencies
"""
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from qr_order.database import get_db
from qr_order.publishers.event_publisher import EventPublisher
from qr_order.services.auth_service import AdminAuthService
from qr_order.services.order_service import OrderService
from qr_order.services.stop_flag_service import StopFlagService


def get_event_publisher() -> EventPublisher:
    """Dependency to get EventPublisher instance"""
    return EventPublisher()


def get_order_service(
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher)
) -> OrderService:
    """Dependency to get OrderService instance"""
    return OrderService(db, event_publisher=publisher)


def get_stop_flag_service(db: Session = Depends(get_db)) -> StopFlagService:
    """Dependency to get StopFlagService instance"""
    return StopFlagService(db)


def get_auth_service() -> AdminAuthService:
    """Dependency to get AdminAuthService instance"""
    return AdminAuthService()


def require_admin(
    request: Request,
    auth: AdminAuthService = Depends(get_auth_service)
) -> None:
    """Reject requests without the admin cookie"""
    if not auth.is_authenticated(request.cookies):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )
