"""
Publishers package
"""
from qr_order.publishers.event_publisher import EventPublisher

__all__ = ["EventPublisher"]
