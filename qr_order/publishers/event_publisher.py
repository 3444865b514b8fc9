"""
RabbitMQ Event Publisher for the order change feed
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict

import pika

from qr_order.config import settings
from qr_order.schemas.order import OrderEvent

logger = logging.getLogger(__name__)

ORDER_CREATED_KEY = "order.created"
ORDER_STATUS_CHANGED_KEY = "order.status.changed"
ORDERS_RESET_KEY = "orders.reset"


class EventPublisher:
    """Publisher for sending order events to RabbitMQ"""

    def __init__(self):
        self.rabbitmq_url = settings.RABBITMQ_URL
        self.exchange = settings.RABBITMQ_EXCHANGE
        self.enabled = settings.EVENTS_ENABLED

    def build_event(self, event_type: str, data: Dict) -> OrderEvent:
        return OrderEvent(
            event_type=event_type,
            event_id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc).isoformat(),
            source=settings.SERVICE_NAME,
            data=data,
        )

    def publish(self, event_type: str, routing_key: str, data: Dict) -> bool:
        """
        Publish an event to the orders exchange

        Args:
            event_type: Event name, e.g. OrderCreated
            routing_key: Topic routing key
            data: Event payload

        Returns:
            True if published successfully, False otherwise
        """
        if not self.enabled:
            logger.debug("Event publishing disabled, skipping %s", event_type)
            return False

        event = self.build_event(event_type, data)
        try:
            connection = pika.BlockingConnection(
                pika.URLParameters(self.rabbitmq_url)
            )
            try:
                channel = connection.channel()
                channel.exchange_declare(
                    exchange=self.exchange,
                    exchange_type='topic',
                    durable=True
                )
                channel.confirm_delivery()
                channel.basic_publish(
                    exchange=self.exchange,
                    routing_key=routing_key,
                    body=event.model_dump_json(),
                    properties=pika.BasicProperties(
                        delivery_mode=2,  # Persistent message
                        content_type='application/json',
                        correlation_id=event.event_id
                    ),
                )
            finally:
                connection.close()
        except pika.exceptions.AMQPError as e:
            logger.warning("Error publishing %s event: %s", event_type, e)
            return False

        logger.info("Event published: %s (ID: %s)", event_type, event.event_id)
        return True

    def publish_order_created(self, order_data: Dict) -> bool:
        """Publish OrderCreated event"""
        return self.publish("OrderCreated", ORDER_CREATED_KEY, order_data)

    def publish_order_status_changed(self, order_data: Dict) -> bool:
        """Publish OrderStatusChanged event"""
        return self.publish("OrderStatusChanged", ORDER_STATUS_CHANGED_KEY, order_data)

    def publish_orders_reset(self, reset_data: Dict) -> bool:
        """Publish OrdersReset event"""
        return self.publish("OrdersReset", ORDERS_RESET_KEY, reset_data)

