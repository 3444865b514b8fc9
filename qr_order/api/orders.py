"""
Order API endpoints
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, Response, status
from starlette.concurrency import run_in_threadpool

from qr_order.api.deps import get_order_service, get_stop_flag_service, require_admin
from qr_order.config import settings
from qr_order.exceptions import (
    InvalidPayloadError,
    OrderingStoppedError,
    OrderNotFoundError,
    OrderNumberExhaustedError,
)
from qr_order.models.order import ORDER_STATUSES
from qr_order.services.order_service import OrderService
from qr_order.services.stop_flag_service import StopFlagService
from qr_order.schemas.admin import StopStatusResponse
from qr_order.schemas.order import (
    OrderStatusUpdate,
    OrderCreatedResponse,
    OrderDetailResponse,
    OrderUpdatedResponse,
    OrderListResponse,
    OrderResetResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("", response_model=OrderListResponse, summary="List orders")
def get_orders(
    status_filter: Optional[str] = Query(None, alias="status", description="pending, completed or cancelled"),
    limit: int = Query(settings.ORDER_LIST_DEFAULT_LIMIT, description="Maximum number of orders to return (capped)"),
    offset: int = Query(0, description="Number of orders to skip"),
    service: OrderService = Depends(get_order_service)
):
    """
    Retrieve orders newest first

    - **status**: Optional status filter
    - **limit**: Page size (default: 50, capped at 100)
    - **offset**: Number of orders to skip (default: 0)

    `pending_count` always counts every pending order, whatever the filter.
    """
    if status_filter == "":
        status_filter = None
    if status_filter is not None and status_filter not in ORDER_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid status filter: {status_filter}"
        )
    return service.list_orders(status=status_filter, limit=limit, offset=offset)


@router.post("", response_model=OrderCreatedResponse, status_code=status.HTTP_201_CREATED, summary="Create order")
async def create_order(
    request: Request,
    response: Response,
    idempotency_key: Optional[str] = Header(None, description="Client token for safe retries"),
    service: OrderService = Depends(get_order_service)
):
    """
    Create a new order

    Process:
    1. Reject with 403 while ordering is stopped
    2. Return the existing order for a known Idempotency-Key (200)
    3. Validate items and note
    4. Generate a unique order number and save the order (201)
    5. Publish OrderCreated event to RabbitMQ

    - **items**: Non-empty list of {id, name, qty, price?}
    - **note**: Optional note, up to 500 characters
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = {}

    try:
        # Store queries and the broker publish block
        order, created = await run_in_threadpool(
            service.create_order, payload, idempotency_key=idempotency_key
        )
    except OrderingStoppedError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": "stopped", "message": settings.ORDER_STOP_MESSAGE}
        )
    except InvalidPayloadError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": str(e), "details": e.details}
        )
    except OrderNumberExhaustedError as e:
        logger.error("Order number generation exhausted: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e)
        )

    if not created:
        response.status_code = status.HTTP_200_OK
    return OrderCreatedResponse(order=order, order_no=order.order_no)


@router.post(
    "/reset",
    response_model=OrderResetResponse,
    dependencies=[Depends(require_admin)],
    summary="Delete completed and cancelled orders"
)
def reset_orders(service: OrderService = Depends(get_order_service)):
    """
    Remove every completed or cancelled order. Pending orders are kept.

    Requires the admin cookie. Irreversible.
    """
    return OrderResetResponse(deleted=service.reset_orders())


@router.api_route("/reset", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
def reset_method_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed"
    )


@router.get("/stop", response_model=StopStatusResponse, summary="Read order stop flag")
def get_stop(service: StopFlagService = Depends(get_stop_flag_service)):
    """Read-only stop flag for the ordering page"""
    return StopStatusResponse(stopped=service.is_stopped())


@router.get("/{key}", response_model=OrderDetailResponse, summary="Get order by order number or ID")
def get_order(
    key: str,
    service: OrderService = Depends(get_order_service)
):
    """
    Retrieve a specific order

    - **key**: Order number, or store ID when no order number matches
    """
    try:
        return OrderDetailResponse(item=service.get_order(key))
    except OrderNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="not found"
        )


@router.patch("/{key}", response_model=OrderUpdatedResponse, summary="Update order status")
def update_order_status(
    key: str,
    status_data: OrderStatusUpdate,
    service: OrderService = Depends(get_order_service)
):
    """
    Update order status (any transition is accepted)

    - **key**: Order number or store ID
    - **status**: New status (pending, completed, cancelled)
    """
    try:
        order = service.update_order_status(key, status_data.status)
    except OrderNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="not found"
        )
    return OrderUpdatedResponse(order=order)
