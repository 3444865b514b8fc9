"""
SQLAlchemy key-value settings model
"""
from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.sql import func
from qr_order.database import Base


class AppSetting(Base):
    """Application-wide setting shared by every service instance"""

    __tablename__ = "app_settings"

    key = Column(String(100), primary_key=True)
    value = Column(JSON, nullable=False, default=dict)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<AppSetting(key={self.key}, value={self.value})>"
