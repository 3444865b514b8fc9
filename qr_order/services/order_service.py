"""
Order Service - Business Logic Layer
"""
import logging
import re
from typing import Any, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from tenacity import Retrying, stop_after_attempt, retry_if_exception_type

from qr_order.config import settings
from qr_order.exceptions import (
    IdempotencyConflictError,
    InvalidPayloadError,
    OrderingStoppedError,
    OrderNotFoundError,
    OrderNumberCollisionError,
    OrderNumberExhaustedError,
)
from qr_order.models.order import Order
from qr_order.publishers.event_publisher import EventPublisher
from qr_order.repositories.order_repository import OrderRepository, unique_violation_column
from qr_order.schemas.order import OrderCreate, OrderResponse, OrderListResponse
from qr_order.schemas.validation import flatten_validation_errors
from qr_order.services.order_number import OrderNumberGenerator
from qr_order.services.stop_flag_service import StopFlagService

logger = logging.getLogger(__name__)

# Store-assigned ids are UUIDs; anything else is only looked up as an order number
ORDER_ID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)

RESETTABLE_STATUSES = ["completed", "cancelled"]
MAX_ORDER_NO_ATTEMPTS = 50


class OrderService:
    """Service layer for order business logic"""

    def __init__(
        self,
        db: Session,
        event_publisher: Optional[EventPublisher] = None,
        number_generator: Optional[OrderNumberGenerator] = None,
    ):
        self.repository = OrderRepository(db)
        self.stop_flag = StopFlagService(db)
        self.event_publisher = event_publisher or EventPublisher()
        self.number_generator = number_generator or OrderNumberGenerator()
        self.max_attempts = max(1, min(settings.ORDER_NO_MAX_ATTEMPTS, MAX_ORDER_NO_ATTEMPTS))

    def list_orders(
        self,
        status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> OrderListResponse:
        """Get orders newest first with filter-independent pending count"""
        limit = max(1, min(limit, settings.ORDER_LIST_MAX_LIMIT))
        offset = max(0, offset)
        orders = self.repository.list(status=status, offset=offset, limit=limit)

        return OrderListResponse(
            items=[OrderResponse.model_validate(o) for o in orders],
            total_count=self.repository.count(status=status),
            pending_count=self.repository.count(status="pending"),
        )

    def _resolve(self, key: str) -> Optional[Order]:
        order = self.repository.get_by_order_no(key)
        if order is None and ORDER_ID_PATTERN.match(key):
            order = self.repository.get_by_id(key)
        return order

    def get_order(self, key: str) -> OrderResponse:
        """
        Get order by order number, falling back to id

        Raises:
            OrderNotFoundError: If neither column matches
        """
        order = self._resolve(key)
        if order is None:
            raise OrderNotFoundError(f"Order {key} not found")
        return OrderResponse.model_validate(order)

    def create_order(
        self,
        payload: Any,
        idempotency_key: Optional[str] = None,
    ) -> Tuple[OrderResponse, bool]:
        """
        Create new order

        Steps:
        1. Reject when the stop flag is set
        2. Replay an existing order for a known idempotency key
        3. Validate payload
        4. Insert with a freshly generated order number, retrying collisions
        5. Publish OrderCreated event

        Args:
            payload: Decoded JSON request body
            idempotency_key: Optional client token

        Returns:
            (order, created) where created is False for an idempotent replay

        Raises:
            OrderingStoppedError: If new orders are not accepted
            InvalidPayloadError: If the payload fails validation
            OrderNumberExhaustedError: If every order number attempt collided
        """
        if self.stop_flag.is_stopped():
            raise OrderingStoppedError("Ordering is stopped")

        if idempotency_key:
            existing = self.repository.get_by_idempotency_key(idempotency_key)
            if existing is not None:
                logger.info("Idempotent replay of order %s", existing.order_no)
                return OrderResponse.model_validate(existing), False

        try:
            order_data = OrderCreate.model_validate(payload if isinstance(payload, dict) else {})
        except ValidationError as e:
            raise InvalidPayloadError(flatten_validation_errors(e.errors()))

        fields = {
            "items": [item.model_dump(exclude_none=True) for item in order_data.items],
            "note": order_data.note,
            "status": "pending",
            "source": "web",
            "idempotency_key": idempotency_key or None,
        }

        try:
            order = self._insert_with_order_no(fields)
        except IdempotencyConflictError as e:
            existing = self.repository.get_by_idempotency_key(e.key)
            if existing is None:
                raise
            logger.info("Concurrent create for idempotency key resolved to %s", existing.order_no)
            return OrderResponse.model_validate(existing), False

        logger.info("Order %s created with %d item(s)", order.order_no, len(order.items))

        self.event_publisher.publish_order_created({
            "order_id": order.id,
            "order_no": order.order_no,
            "items": order.items,
            "note": order.note,
            "status": order.status,
        })

        return OrderResponse.model_validate(order), True

    def _insert_with_order_no(self, fields: dict) -> Order:
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            retry=retry_if_exception_type(OrderNumberCollisionError),
            reraise=True,
        )
        try:
            return retrying(self._try_insert, fields)
        except OrderNumberCollisionError:
            raise OrderNumberExhaustedError(
                f"Could not generate a unique order number after {self.max_attempts} attempts"
            )

    def _try_insert(self, fields: dict) -> Order:
        order_no = self.number_generator.generate()
        try:
            return self.repository.create({**fields, "order_no": order_no})
        except IntegrityError as e:
            column = unique_violation_column(e)
            if column == "order_no":
                logger.warning("Order number %s already taken, regenerating", order_no)
                raise OrderNumberCollisionError(order_no)
            if column == "idempotency_key":
                raise IdempotencyConflictError(fields["idempotency_key"])
            raise

    def update_order_status(self, key: str, new_status: str) -> OrderResponse:
        """
        Overwrite order status; last writer wins

        Raises:
            OrderNotFoundError: If no order matches key
        """
        order = self._resolve(key)
        if order is None:
            raise OrderNotFoundError(f"Order {key} not found")

        old_status = order.status
        order = self.repository.update_status(order, new_status)

        self.event_publisher.publish_order_status_changed({
            "order_id": order.id,
            "order_no": order.order_no,
            "old_status": old_status,
            "new_status": order.status,
            "updated_at": order.updated_at.isoformat(),
        })

        return OrderResponse.model_validate(order)

    def reset_orders(self) -> int:
        """Delete completed and cancelled orders; pending orders are kept"""
        deleted = self.repository.delete_by_statuses(RESETTABLE_STATUSES)
        logger.info("Reset removed %d finished order(s)", deleted)

        self.event_publisher.publish_orders_reset({
            "deleted": deleted,
            "statuses": RESETTABLE_STATUSES,
        })

        return deleted
