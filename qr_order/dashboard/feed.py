"""
RabbitMQ consumer feeding order change events to the dashboard
"""
import asyncio
import json
import logging
import threading
from typing import Callable, Optional

import pika

from qr_order.config import settings

logger = logging.getLogger(__name__)

BINDING_KEYS = ("order.#", "orders.#")


class ChangeFeedSubscriber:
    """
    Consume order events on a worker thread

    Each event is handed to on_event on the asyncio loop through
    call_soon_threadsafe; on_event is expected to rate limit itself.
    The queue is exclusive to this subscriber and removed on disconnect.
    """

    def __init__(
        self,
        on_event: Callable[[dict], object],
        loop: asyncio.AbstractEventLoop,
        rabbitmq_url: Optional[str] = None,
        exchange: Optional[str] = None,
    ):
        self.on_event = on_event
        self.loop = loop
        self.rabbitmq_url = rabbitmq_url or settings.RABBITMQ_URL
        self.exchange = exchange or settings.RABBITMQ_EXCHANGE
        self._connection = None
        self._channel = None
        self._thread: Optional[threading.Thread] = None

    def handle_message(self, body: bytes) -> bool:
        """
        Parse one message and schedule on_event

        Returns:
            True if the event was forwarded
        """
        try:
            event = json.loads(body)
        except json.JSONDecodeError as e:
            logger.warning("Invalid JSON on change feed: %s", e)
            return False
        if not isinstance(event, dict):
            logger.warning("Unexpected change feed payload: %r", event)
            return False

        logger.debug("Received event: %s (ID: %s)", event.get("event_type"), event.get("event_id"))
        self.loop.call_soon_threadsafe(self.on_event, event)
        return True

    def _callback(self, ch, method, properties, body):
        self.handle_message(body)

    def _consume(self) -> None:
        try:
            logger.info("Connecting to RabbitMQ: %s", self.rabbitmq_url)
            self._connection = pika.BlockingConnection(
                pika.URLParameters(self.rabbitmq_url)
            )
            channel = self._connection.channel()
            self._channel = channel

            channel.exchange_declare(
                exchange=self.exchange,
                exchange_type='topic',
                durable=True
            )
            result = channel.queue_declare(queue="", exclusive=True, auto_delete=True)
            queue = result.method.queue
            for key in BINDING_KEYS:
                channel.queue_bind(exchange=self.exchange, queue=queue, routing_key=key)

            channel.basic_consume(
                queue=queue,
                on_message_callback=self._callback,
                auto_ack=True
            )
            logger.info("Change feed subscribed on %s (%s)", self.exchange, ", ".join(BINDING_KEYS))
            channel.start_consuming()
        except pika.exceptions.AMQPError as e:
            # Polling keeps the dashboard current without the feed
            logger.error("Change feed unavailable: %s", e)
        finally:
            if self._connection is not None and self._connection.is_open:
                self._connection.close()

    def start(self) -> None:
        self._thread = threading.Thread(target=self._consume, name="change-feed", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if self._connection is not None and self._channel is not None and self._connection.is_open:
            self._connection.add_callback_threadsafe(self._channel.stop_consuming)
        if self._thread is not None:
            self._thread.join(timeout=5)
