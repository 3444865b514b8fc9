"""
Public status endpoint for the customer ordering site
"""
from fastapi import APIRouter, Depends

from qr_order.api.deps import get_stop_flag_service
from qr_order.config import settings
from qr_order.services.stop_flag_service import StopFlagService
from qr_order.schemas.admin import PublicStatusResponse

router = APIRouter(prefix="/api/public", tags=["public"])


@router.get("/status", response_model=PublicStatusResponse, summary="Ordering status")
def public_status(service: StopFlagService = Depends(get_stop_flag_service)):
    """Whether ordering is currently stopped, with a message to show customers"""
    stopped = service.is_stopped()
    return PublicStatusResponse(
        stopped=stopped,
        message=settings.ORDER_STOP_MESSAGE if stopped else ""
    )
