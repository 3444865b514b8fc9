"""
SQLAlchemy Order model
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, DateTime, JSON, CheckConstraint, UniqueConstraint
from sqlalchemy.sql import func
from qr_order.database import Base


ORDER_STATUSES = ("pending", "completed", "cancelled")


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(Base):
    """Order database model"""

    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=_new_id)
    order_no = Column(String(32), nullable=False)
    items = Column(JSON, nullable=False)
    note = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default="pending", index=True)
    source = Column(String(20), nullable=False, default="web")
    idempotency_key = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), onupdate=_utcnow, nullable=False)

    # Constraints
    __table_args__ = (
        UniqueConstraint("order_no", name="uq_orders_order_no"),
        UniqueConstraint("idempotency_key", name="uq_orders_idempotency_key"),
        CheckConstraint("status IN ('pending', 'completed', 'cancelled')", name="check_status_valid"),
    )

    def __repr__(self):
        return f"<Order(id={self.id}, order_no={self.order_no}, status='{self.status}')>"
