"""
workflows/platform_settings.py

Platform-wide key/value settings stored in ``platform_settings``
(``setting_key`` / ``setting_value``), overlaid on built-in defaults.
"""

from __future__ import annotations

import logging
from typing import Any

from storage.backend import Backend
from storage.query import Query
from workflows.notifications import NoticeBoard
from workflows.schemas import DEFAULT_PLATFORM_SETTINGS, utcnow

logger = logging.getLogger(__name__)

TABLE = "platform_settings"


def has_changes(current: dict[str, Any], original: dict[str, Any]) -> bool:
    keys = set(current) | set(original)
    return any(current.get(k) != original.get(k) for k in keys)


class PlatformSettingsService:
    def __init__(self, backend: Backend, notices: NoticeBoard):
        self._backend = backend
        self._notices = notices

    async def load(self) -> dict[str, Any]:
        """Defaults merged with whatever is stored; defaults alone on failure."""
        settings = dict(DEFAULT_PLATFORM_SETTINGS)
        result = await self._backend.select(Query(TABLE, columns="setting_key,setting_value"))
        if not result.ok:
            logger.error("Error loading platform settings: %s", result.error_message)
            self._notices.error("Platform settings could not be loaded; showing defaults.")
            return settings

        for row in result.rows():
            key = row.get("setting_key")
            if key:
                settings[key] = row.get("setting_value")
        return settings

    async def save(self, settings: dict[str, Any]) -> bool:
        now = utcnow().isoformat()
        rows = [
            {"setting_key": key, "setting_value": value, "updated_at": now}
            for key, value in settings.items()
        ]
        result = await self._backend.upsert(TABLE, rows, on_conflict="setting_key")
        if not result.ok:
            logger.error("Error saving platform settings: %s", result.error_message)
            self._notices.error("Platform settings could not be saved.")
            return False
        self._notices.success("Platform settings saved.")
        return True
