"""Settings domain service."""

from datetime import date
from typing import Any, Optional

from dentbooks.database.base import Database, SCHEMA_VERSION
from dentbooks.domain.entities import Setting

ACTIVE_PRACTICE_ID = "activePracticeId"
CURRENCY = "currency"
FISCAL_YEAR = "fiscalYear"
SETUP_COMPLETE = "setupComplete"
SCHEMA_VERSION_KEY = "schema_version"


class SettingService:
    """Service for key-value preferences stored with the books."""

    def __init__(self, db: Database):
        """Initialize setting service.

        Args:
            db: Database instance
        """
        self.db = db

    def get(self, key: str, default: Any = None) -> Any:
        """Get a setting value, or default if unset."""
        setting = self.db.get_setting(key)
        if setting is None:
            return default
        return setting.value

    def set(self, key: str, value: Any) -> None:
        """Create or replace a setting value."""
        self.db.set_setting(key, value)

    def list_settings(self) -> list[Setting]:
        """List all settings."""
        return self.db.list_settings()

    def seed_defaults(self) -> bool:
        """Write first-run settings.

        Returns:
            True if settings were written, False if setup had already run
        """
        self.db.set_setting(SCHEMA_VERSION_KEY, SCHEMA_VERSION)
        if self.get(SETUP_COMPLETE, False):
            return False
        self.db.set_setting(CURRENCY, "USD")
        self.db.set_setting(FISCAL_YEAR, date.today().year)
        self.db.set_setting(SETUP_COMPLETE, True)
        return True

    def get_active_practice_id(self) -> Optional[int]:
        """Return the practice commands fall back to, if one was chosen."""
        return self.get(ACTIVE_PRACTICE_ID)

    def set_active_practice_id(self, practice_id: int) -> None:
        self.set(ACTIVE_PRACTICE_ID, practice_id)

    def get_fiscal_year(self) -> int:
        return self.get(FISCAL_YEAR, date.today().year)
