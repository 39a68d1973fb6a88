"""
Preference API routes.

Preferences are free-form key-value pairs that survive a data wipe.
"""

from fastapi import APIRouter
import structlog

from exceptions import SettingNotFoundError
from models.settings import (
    SettingUpdate,
    SettingResponse,
    SettingListResponse,
)
from routes.errors import handle_error
from services.settings_service import get_settings_service

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("", response_model=SettingListResponse)
async def list_settings():
    """List all preferences ordered by key."""
    try:
        settings = await get_settings_service().get_all()
        return SettingListResponse(data=settings, total=len(settings))

    except Exception as e:
        return handle_error(e)


@router.get("/{key}", response_model=SettingResponse)
async def get_setting(key: str):
    """Get preference by key."""
    try:
        value = await get_settings_service().get_value(key)
        if value is None:
            raise SettingNotFoundError(key)
        return SettingResponse(key=key, value=value)

    except Exception as e:
        return handle_error(e)


@router.put("/{key}", response_model=SettingResponse)
async def update_setting(key: str, data: SettingUpdate):
    """Set preference value."""
    try:
        return await get_settings_service().update(key, data)

    except Exception as e:
        return handle_error(e)
