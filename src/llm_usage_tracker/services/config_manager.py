"""Application configuration backed by the usage store's settings table."""

import logging

from PySide6.QtCore import QObject, Signal, Slot

from llm_usage_tracker.services.usage_store import UsageStore

logger = logging.getLogger(__name__)

# Default values
DEFAULTS = {
    "refreshRate": "15min",
    "normalFontSize": "medium",
    "miniFontSize": "medium",
    "debugLogging": False,
}

# Auto refresh intervals for the refreshRate setting
REFRESH_RATE_MS = {
    "15min": 15 * 60 * 1000,
    "30min": 30 * 60 * 1000,
    "1hour": 60 * 60 * 1000,
}


class ConfigManager(QObject):
    """Typed access to persisted settings with change notification."""

    settings_changed = Signal(str)  # key

    def __init__(self, store: UsageStore, parent=None):
        super().__init__(parent)
        self._store = store

    @Slot(str, result=str)
    def get_string(self, key: str) -> str:
        return self._store.get_setting(key, str(DEFAULTS.get(key, "")))

    @Slot(str, result=int)
    def get_int(self, key: str) -> int:
        default = DEFAULTS.get(key, 0)
        if isinstance(default, bool) or not isinstance(default, int):
            default = 0
        val = self._store.get_setting(key, "")
        if not val:
            return default
        try:
            return int(val)
        except (ValueError, TypeError):
            return default

    @Slot(str, result=bool)
    def get_bool(self, key: str) -> bool:
        val = self._store.get_setting(key, "")
        if not val:
            return bool(DEFAULTS.get(key, False))
        return val.lower() in ("true", "1", "yes")

    @Slot(str, str)
    def set_string(self, key: str, value: str):
        self._store.set_setting(key, value)
        self.settings_changed.emit(key)

    @Slot(str, int)
    def set_int(self, key: str, value: int):
        self._store.set_setting(key, str(value))
        self.settings_changed.emit(key)

    @Slot(str, bool)
    def set_bool(self, key: str, value: bool):
        self._store.set_setting(key, "true" if value else "false")
        self.settings_changed.emit(key)

    def refresh_interval_ms(self) -> int:
        """Auto refresh interval for the current refreshRate setting."""
        rate = self.get_string("refreshRate")
        if rate not in REFRESH_RATE_MS:
            logger.warning("Unknown refreshRate %r, using %s", rate, DEFAULTS["refreshRate"])
            rate = DEFAULTS["refreshRate"]
        return REFRESH_RATE_MS[rate]
