"""
Health and service info endpoints
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from qr_order.config import settings
from qr_order.database import get_db
from qr_order.services.stop_flag_service import StopFlagService

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Report database reachability and whether orders are being accepted.
    The status is "unhealthy" only when the database check fails.
    """
    ordering = "unknown"
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
        ordering = "stopped" if StopFlagService(db).is_stopped() else "open"
    except SQLAlchemyError as e:
        db_status = f"unhealthy: {e}"

    return {
        "service": settings.SERVICE_NAME,
        "status": "healthy" if db_status == "healthy" else "unhealthy",
        "database": db_status,
        "ordering": ordering,
        "events": "enabled" if settings.EVENTS_ENABLED else "disabled",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/")
def root():
    return {
        "service": settings.SERVICE_NAME,
        "version": "1.0.0",
        "docs": "/docs",
        "admin": "/admin/orders"
    }
