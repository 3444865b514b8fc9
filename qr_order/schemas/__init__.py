"""
Schemas package
"""
from qr_order.schemas.order import (
    OrderStatus,
    OrderItem,
    OrderCreate,
    OrderStatusUpdate,
    OrderResponse,
    OrderCreatedResponse,
    OrderDetailResponse,
    OrderUpdatedResponse,
    OrderListResponse,
    OrderResetResponse,
    OrderEvent
)
from qr_order.schemas.admin import (
    LoginRequest,
    LoginStatusResponse,
    StopUpdate,
    StopStatusResponse,
    PublicStatusResponse
)

__all__ = [
    "OrderStatus",
    "OrderItem",
    "OrderCreate",
    "OrderStatusUpdate",
    "OrderResponse",
    "OrderCreatedResponse",
    "OrderDetailResponse",
    "OrderUpdatedResponse",
    "OrderListResponse",
    "OrderResetResponse",
    "OrderEvent",
    "LoginRequest",
    "LoginStatusResponse",
    "StopUpdate",
    "StopStatusResponse",
    "PublicStatusResponse"
]
