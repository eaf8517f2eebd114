"""
Settings service for stored reorder settings.

Settings are pre-seeded key-value pairs in the settings table. Values
stored there override the environment defaults from config.settings.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)


# Setting keys read for each replenishment run
REORDER_SETTING_KEYS = [
    "default_supply_days",
    "reorder_safety_days",
    "reorder_priority_urgent_days",
    "reorder_priority_high_days",
    "reorder_priority_medium_days",
    "reorder_priority_low_days",
]

# Accepted range per key; stored values outside it fall back to the env default
REORDER_SETTING_RANGES = {
    "default_supply_days": (1, 365),
    "reorder_safety_days": (0, 365),
    "reorder_priority_urgent_days": (0, 365),
    "reorder_priority_high_days": (0, 365),
    "reorder_priority_medium_days": (0, 365),
    "reorder_priority_low_days": (0, 365),
}


class SettingsService:
    """
    Read-only access to stored settings.

    Editing settings is handled by the admin screens, not here.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "settings"

    def get_by_keys(self, keys: list[str]) -> dict[str, str]:
        """
        Get multiple settings by keys.

        Args:
            keys: List of setting keys

        Returns:
            Dictionary of key -> value (missing keys are absent)
        """
        logger.debug("getting_settings_bulk", keys=keys)

        try:
            response = (
                self.db.table(self.table)
                .select("key, value")
                .in_("key", keys)
                .execute()
            )

            return {row["key"]: row["value"] for row in response.data}

        except Exception as e:
            logger.error("settings_bulk_get_failed", error=str(e))
            raise DatabaseError("select", str(e))

    def get_reorder_settings(self) -> dict[str, int]:
        """
        Get stored reorder overrides as integers.

        Unparseable or out-of-range values are skipped so the environment
        default applies (a stored supply of 0 means "unset").

        Returns:
            Dictionary of setting key -> int, only for keys that are set
        """
        raw = self.get_by_keys(REORDER_SETTING_KEYS)

        overrides: dict[str, int] = {}
        for key, value in raw.items():
            parsed = _parse_int(value)
            if parsed is None:
                logger.warning("invalid_reorder_setting", key=key, value=value)
                continue
            low, high = REORDER_SETTING_RANGES[key]
            if not low <= parsed <= high:
                logger.warning("reorder_setting_out_of_range", key=key, value=parsed, min=low, max=high)
                continue
            overrides[key] = parsed

        return overrides


def _parse_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


# Singleton instance
_settings_service: Optional[SettingsService] = None


def get_settings_service() -> SettingsService:
    """Get or create SettingsService instance."""
    global _settings_service
    if _settings_service is None:
        _settings_service = SettingsService()
    return _settings_service
