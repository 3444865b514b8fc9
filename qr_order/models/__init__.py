"""
Models package
"""
from qr_order.models.order import Order, ORDER_STATUSES
from qr_order.models.app_setting import AppSetting

__all__ = ["Order", "ORDER_STATUSES", "AppSetting"]
