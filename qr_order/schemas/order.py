"""
Pydantic schemas for request/response validation
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional, Literal
from datetime import datetime


OrderStatus = Literal['pending', 'completed', 'cancelled']


class OrderItem(BaseModel):
    """Single line item of an order"""
    id: str = Field(..., min_length=1, description="Menu item ID")
    name: str = Field(..., min_length=1, description="Menu item name")
    qty: int = Field(..., gt=0, strict=True, description="Quantity")
    price: Optional[float] = Field(None, ge=0, description="Unit price")


class OrderCreate(BaseModel):
    """Schema for creating a new order"""
    items: List[OrderItem] = Field(..., min_length=1, description="Ordered items")
    note: Optional[str] = Field(None, max_length=500, description="Free text note")


class OrderStatusUpdate(BaseModel):
    """Schema for updating order status"""
    status: OrderStatus = Field(..., description="Order status")


class OrderResponse(BaseModel):
    """Schema for order response"""
    id: str
    order_no: str
    items: List[OrderItem]
    note: Optional[str]
    status: OrderStatus
    source: str
    idempotency_key: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderCreatedResponse(BaseModel):
    ok: bool = True
    order: OrderResponse
    order_no: str


class OrderDetailResponse(BaseModel):
    ok: bool = True
    item: OrderResponse


class OrderUpdatedResponse(BaseModel):
    ok: bool = True
    order: OrderResponse


class OrderListResponse(BaseModel):
    """Schema for list of orders response"""
    ok: bool = True
    items: List[OrderResponse]
    total_count: int
    pending_count: int


class OrderResetResponse(BaseModel):
    ok: bool = True
    deleted: int


class OrderEvent(BaseModel):
    """Schema for order change feed event payload"""
    event_type: str
    event_id: str
    event_version: str = "1.0"
    timestamp: str
    source: str = "qr-order-service"
    data: dict
