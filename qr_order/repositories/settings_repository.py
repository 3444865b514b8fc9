"""
Settings Repository - key-value access to app_settings
"""
from typing import Optional
from sqlalchemy.orm import Session

from qr_order.models.app_setting import AppSetting


class SettingsRepository:
    """Repository for AppSetting rows"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> Optional[dict]:
        """Get the stored value for key, or None when the row is absent"""
        row = self.db.query(AppSetting).filter(AppSetting.key == key).first()
        if row is None:
            return None
        return row.value or {}

    def upsert(self, key: str, value: dict) -> dict:
        """Insert or replace the value stored for key"""
        row = self.db.get(AppSetting, key)
        if row is None:
            row = AppSetting(key=key, value=value)
            self.db.add(row)
        else:
            row.value = value
        self.db.commit()
        self.db.refresh(row)
        return row.value
