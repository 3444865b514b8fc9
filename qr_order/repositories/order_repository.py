"""
Order Repository - Data Access Layer
"""
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import desc, func

from qr_order.models.order import Order

UNIQUE_VIOLATION_PGCODE = "23505"


def unique_violation_column(error: IntegrityError) -> Optional[str]:
    """
    Name the unique column an IntegrityError was raised for

    Returns "order_no", "idempotency_key" or None when the error is not a
    uniqueness violation on either column.
    """
    orig = error.orig
    message = str(orig)
    pgcode = getattr(orig, "pgcode", None)
    is_unique = pgcode == UNIQUE_VIOLATION_PGCODE or "UNIQUE constraint failed" in message
    if not is_unique:
        return None
    for column in ("idempotency_key", "order_no"):
        if column in message:
            return column
    return None


class OrderRepository:
    """Repository for Order CRUD operations"""

    def __init__(self, db: Session):
        self.db = db

    def list(self, status: Optional[str] = None, offset: int = 0, limit: int = 50) -> List[Order]:
        """Get orders newest first, optionally filtered by status"""
        query = self.db.query(Order)
        if status:
            query = query.filter(Order.status == status)
        return query.order_by(
            desc(Order.created_at)
        ).offset(offset).limit(limit).all()

    def get_by_id(self, order_id: str) -> Optional[Order]:
        """Get order by store-assigned ID"""
        return self.db.query(Order).filter(Order.id == order_id).first()

    def get_by_order_no(self, order_no: str) -> Optional[Order]:
        """Get order by human-facing order number"""
        return self.db.query(Order).filter(Order.order_no == order_no).first()

    def get_by_idempotency_key(self, key: str) -> Optional[Order]:
        """Get order created with the given idempotency key"""
        return self.db.query(Order).filter(Order.idempotency_key == key).first()

    def create(self, order_data: dict) -> Order:
        """
        Create new order

        Args:
            order_data: Dictionary with order fields

        Returns:
            Created order

        Raises:
            IntegrityError: On a constraint violation; the session is rolled back
        """
        order = Order(**order_data)
        self.db.add(order)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise
        self.db.refresh(order)
        return order

    def update_status(self, order: Order, new_status: str) -> Order:
        """Overwrite order status"""
        order.status = new_status
        self.db.commit()
        self.db.refresh(order)
        return order

    def delete_by_statuses(self, statuses: List[str]) -> int:
        """Delete every order whose status is in statuses, returning the row count"""
        deleted = self.db.query(Order).filter(
            Order.status.in_(statuses)
        ).delete(synchronize_session=False)
        self.db.commit()
        return deleted

    def count(self, status: Optional[str] = None) -> int:
        """Get count of orders, optionally filtered by status"""
        query = self.db.query(func.count(Order.id))
        if status:
            query = query.filter(Order.status == status)
        return query.scalar() or 0
