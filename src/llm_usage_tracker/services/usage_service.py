"""Qt-facing usage API: the surface the UI layer calls into."""

import logging
from typing import Callable

from PySide6.QtCore import QObject, Signal, Slot, Property, QTimer, QThread

from llm_usage_tracker.services.config_manager import ConfigManager
from llm_usage_tracker.services.sync_engine import SyncEngine
from llm_usage_tracker.types import Provider

logger = logging.getLogger(__name__)


class _SyncWorker(QThread):
    """Background thread running a forced refresh."""

    sync_finished = Signal(dict)  # usage snapshot
    sync_failed = Signal(str)     # error message

    def __init__(self, engine: SyncEngine, parent=None):
        super().__init__(parent)
        self._engine = engine

    def run(self):
        try:
            snapshot = self._engine.refresh()
            self.sync_finished.emit(snapshot.to_dict())
        except Exception as e:
            logger.exception("Background refresh failed")
            self.sync_failed.emit(str(e))


class UsageService(QObject):
    """Read/refresh API over a SyncEngine.

    Every slot returns ``{"success": True, ...}`` or
    ``{"success": False, "error": message}``; nothing raises into the UI.
    """

    usage_updated = Signal(dict)
    sync_failed = Signal(str)
    loading_changed = Signal()

    def __init__(self, engine: SyncEngine, config: ConfigManager | None = None, parent=None):
        super().__init__(parent)
        self._engine = engine
        self._config = config or ConfigManager(engine.store, self)
        self._loading = False
        self._worker: _SyncWorker | None = None

        self._refresh_timer = QTimer(self)
        self._refresh_timer.timeout.connect(self.refresh_async)
        self._config.settings_changed.connect(self._on_setting_changed)

    def _get_loading(self) -> bool:
        return self._loading

    def _set_loading(self, value: bool):
        if self._loading != value:
            self._loading = value
            self.loading_changed.emit()

    loading = Property(bool, _get_loading, notify=loading_changed)

    @property
    def config(self) -> ConfigManager:
        return self._config

    # ------------------------------------------------------------------
    # Synchronous API
    # ------------------------------------------------------------------

    @Slot(result=dict)
    def get_all_usage(self) -> dict:
        return self._call(lambda: self._engine.get_all_usage().to_dict())

    @Slot(str, result=dict)
    def get_sessions(self, provider: str) -> dict:
        return self._call(
            lambda: [s.to_dict() for s in self._engine.get_sessions(Provider(provider))]
        )

    @Slot(result=dict)
    def refresh_data(self) -> dict:
        return self._call(lambda: self._engine.refresh().to_dict())

    @Slot(result=dict)
    def force_rebuild(self) -> dict:
        return self._call(lambda: self._engine.force_rebuild().to_dict())

    @Slot(result=dict)
    def get_db_stats(self) -> dict:
        return self._call(lambda: self._engine.store.stats().to_dict())

    @Slot(str, str, result=dict)
    def get_setting(self, key: str, default: str = "") -> dict:
        try:
            return {"success": True, "value": self._engine.store.get_setting(key, default)}
        except Exception as e:
            logger.exception("Failed to read setting %s", key)
            return {"success": False, "error": str(e), "value": default}

    @Slot(str, str, result=dict)
    def save_setting(self, key: str, value: str) -> dict:
        try:
            self._config.set_string(key, value)
            return {"success": True}
        except Exception as e:
            logger.exception("Failed to save setting %s", key)
            return {"success": False, "error": str(e)}

    def _call(self, fn: Callable[[], object]) -> dict:
        try:
            return {"success": True, "data": fn()}
        except Exception as e:
            logger.exception("Usage request failed")
            return {"success": False, "error": str(e)}

    # ------------------------------------------------------------------
    # Background refresh
    # ------------------------------------------------------------------

    @Slot()
    def refresh_async(self):
        """Run a forced refresh on a worker thread; emits usage_updated."""
        if self._worker is not None and self._worker.isRunning():
            return

        self._set_loading(True)
        worker = _SyncWorker(self._engine, self)
        worker.sync_finished.connect(self._on_refresh_finished)
        worker.sync_failed.connect(self._on_refresh_failed)
        worker.finished.connect(worker.deleteLater)
        self._worker = worker
        worker.start()

    def _on_refresh_finished(self, usage: dict):
        self._worker = None
        self._set_loading(False)
        self.usage_updated.emit(usage)

    def _on_refresh_failed(self, message: str):
        self._worker = None
        self._set_loading(False)
        self.sync_failed.emit(message)

    @Slot()
    def start_auto_refresh(self):
        """Refresh periodically at the interval of the refreshRate setting."""
        self._refresh_timer.start(self._config.refresh_interval_ms())

    @Slot()
    def stop_auto_refresh(self):
        self._refresh_timer.stop()

    def auto_refresh_interval(self) -> int:
        return self._refresh_timer.interval() if self._refresh_timer.isActive() else 0

    def _on_setting_changed(self, key: str):
        if key == "refreshRate" and self._refresh_timer.isActive():
            self.start_auto_refresh()

    def cleanup(self):
        """Stop the timer and wait for an in-flight refresh."""
        self._refresh_timer.stop()
        if self._worker is not None and self._worker.isRunning():
            self._worker.wait(10000)
        self._worker = None
