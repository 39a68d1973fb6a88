"""
User preference schemas.

Preferences are key-value pairs kept in their own store; wiping the
tracker data leaves them alone.
"""

from typing import Any

from pydantic import Field

from models.base import BaseSchema


class SettingUpdate(BaseSchema):
    """Set a preference value."""

    value: Any = Field(..., description="Preference value (any JSON value)")


class SettingResponse(BaseSchema):
    """Single preference."""

    key: str = Field(..., description="Preference key")
    value: Any = Field(None, description="Preference value")


class SettingListResponse(BaseSchema):
    """List of preferences."""

    data: list[SettingResponse]
    total: int
