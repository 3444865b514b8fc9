"""
Repositories package
"""
from qr_order.repositories.order_repository import OrderRepository, unique_violation_column
from qr_order.repositories.settings_repository import SettingsRepository

__all__ = ["OrderRepository", "SettingsRepository", "unique_violation_column"]
