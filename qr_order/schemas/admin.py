"""
Pydantic schemas for admin and public status endpoints
"""
from typing import Any

from pydantic import BaseModel, Field, field_validator


class LoginRequest(BaseModel):
    password: str = Field("", description="Admin password")

    @field_validator("password", mode="before")
    @classmethod
    def coerce_password(cls, v: Any) -> str:
        # Any JSON value is compared as text
        if v is None:
            return ""
        return v if isinstance(v, str) else str(v)


class LoginStatusResponse(BaseModel):
    ok: bool = True
    authenticated: bool


class StopUpdate(BaseModel):
    """Schema for toggling the order stop flag"""
    stopped: bool = Field(..., description="Reject new orders while true")


class StopStatusResponse(BaseModel):
    ok: bool = True
    stopped: bool


class PublicStatusResponse(BaseModel):
    ok: bool = True
    stopped: bool
    message: str = ""
