"""
Domain exceptions raised by the service layer
"""


class OrderServiceError(Exception):
    """Base exception for order service errors"""
    pass


class OrderingStoppedError(OrderServiceError):
    """New orders are not accepted while the stop flag is set"""
    pass


class OrderNotFoundError(OrderServiceError):
    """No order matches the given id or order number"""
    pass


class OrderNumberCollisionError(OrderServiceError):
    """Generated order number already exists"""
    pass


class OrderNumberExhaustedError(OrderServiceError):
    """Every order number attempt collided"""
    pass


class IdempotencyConflictError(OrderServiceError):
    """Another request inserted an order with the same idempotency key first"""

    def __init__(self, key: str):
        super().__init__(f"Order with idempotency key {key!r} already exists")
        self.key = key


class InvalidPayloadError(OrderServiceError):
    """Request body failed validation"""

    def __init__(self, details: dict):
        super().__init__("Invalid payload")
        self.details = details
