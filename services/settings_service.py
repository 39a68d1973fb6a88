"""
User preference service.

Preferences are free-form key-value pairs (e.g. "defaultView" -> "table")
kept in their own store. Wiping tracker data does not touch them.
"""

from typing import Any, Optional
import structlog

from models.settings import SettingResponse, SettingUpdate
from services.storage import TrackerDatabase, get_database

logger = structlog.get_logger(__name__)

DEFAULT_VIEW_KEY = "defaultView"


class SettingsService:
    """
    Preference business logic.

    Unlike records, preferences have no schema: any JSON value is accepted.
    """

    def __init__(self, database: Optional[TrackerDatabase] = None):
        self.database = database or get_database()
        self.store = self.database.settings

    # ===================
    # READ OPERATIONS
    # ===================

    async def get_all(self) -> list[SettingResponse]:
        """
        Get all preferences ordered by key.

        Returns:
            List of preferences
        """
        items = await self.store.items()
        settings = [SettingResponse(key=key, value=value) for key, value in sorted(items)]
        logger.debug("settings_retrieved", count=len(settings))
        return settings

    async def get_value(self, key: str, default: Optional[Any] = None) -> Any:
        """
        Get preference value by key.

        Args:
            key: Preference key
            default: Returned when the key was never set

        Returns:
            Stored value or default
        """
        value = await self.store.get_item(key)
        return value if value is not None else default

    # ===================
    # UPDATE OPERATIONS
    # ===================

    async def set_value(self, key: str, value: Any) -> SettingResponse:
        """
        Store a preference value.

        Args:
            key: Preference key
            value: Any JSON value

        Returns:
            Stored preference
        """
        await self.store.set_item(key, value)
        logger.info("setting_updated", key=key)
        return SettingResponse(key=key, value=value)

    async def update(self, key: str, data: SettingUpdate) -> SettingResponse:
        """Store a preference from an API payload."""
        return await self.set_value(key, data.value)


_settings_service: Optional[SettingsService] = None


def get_settings_service() -> SettingsService:
    global _settings_service
    if _settings_service is None:
        _settings_service = SettingsService()
    return _settings_service
