"""
Services package
"""
from qr_order.services.order_service import OrderService
from qr_order.services.order_number import OrderNumberGenerator
from qr_order.services.stop_flag_service import StopFlagService
from qr_order.services.auth_service import AdminAuthService

__all__ = ["OrderService", "OrderNumberGenerator", "StopFlagService", "AdminAuthService"]
