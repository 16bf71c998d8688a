"""Incremental sync of provider log files into the usage store."""

import logging
import os
import threading
import time
from pathlib import Path
from typing import Callable

from llm_usage_tracker.parsers import SessionParser, create_parsers
from llm_usage_tracker.services.aggregator import compute_usage
from llm_usage_tracker.services.file_scanner import list_session_files
from llm_usage_tracker.services.usage_store import UsageStore
from llm_usage_tracker.types import Provider, SessionRecord, SyncResult, SyncSummary, UsageSnapshot

logger = logging.getLogger(__name__)

SESSION_DIRS: dict[Provider, Path] = {
    Provider.CLAUDE: Path.home() / ".claude" / "projects",
    Provider.CODEX: Path.home() / ".codex" / "sessions",
    Provider.GEMINI: Path.home() / ".gemini" / "tmp",
}

# Minimum seconds between syncs for debounced reads
DEBOUNCE_S = 5.0


class SyncEngine:
    """Keeps the store in step with the provider log directories.

    Only files whose mtime or size changed since the last sync are parsed.
    Sync passes are serialised; ``get_sessions`` serves a per-provider
    snapshot while the provider was synced less than ``debounce_s`` ago.
    """

    def __init__(
        self,
        store: UsageStore,
        roots: dict[Provider, Path] | None = None,
        parsers: dict[Provider, SessionParser] | None = None,
        debounce_s: float = DEBOUNCE_S,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._store = store
        roots = roots or {}
        self._roots = {p: Path(roots.get(p, SESSION_DIRS[p])) for p in Provider}
        self._parsers = parsers or create_parsers(self._roots)
        self._debounce_s = debounce_s
        self._clock = clock
        self._sync_lock = threading.Lock()
        self._last_sync: dict[Provider, float] = {}
        self._snapshots: dict[Provider, list[SessionRecord]] = {}

    @property
    def store(self) -> UsageStore:
        return self._store

    def root_for(self, provider: Provider) -> Path:
        return self._roots[Provider(provider)]

    def is_available(self, provider: Provider) -> bool:
        return self.root_for(provider).is_dir()

    def clear_cache(self):
        self._snapshots = {}

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    def sync_provider(self, provider: Provider) -> SyncResult:
        """Parse new and changed files of one provider and drop deleted ones."""
        provider = Provider(provider)
        with self._sync_lock:
            result = self._sync_provider(provider)
            self._last_sync[provider] = self._clock()
            if result.changed:
                self._snapshots.pop(provider, None)
        return result

    def _sync_provider(self, provider: Provider) -> SyncResult:
        result = SyncResult()
        root = self.root_for(provider)
        if not root.is_dir():
            return result

        parser = self._parsers[provider]
        files = list_session_files(root)

        for file_path in files:
            try:
                stat = os.stat(file_path)
                mtime = int(stat.st_mtime * 1000)
                size = stat.st_size
                if not self._store.needs_reparse(file_path, mtime, size):
                    continue

                session = parser.parse(file_path)
                if session.messages == 0:
                    continue

                if self._store.record_parse(session, mtime, size):
                    result.added += 1
                else:
                    result.updated += 1
            except OSError as e:
                logger.warning("Error processing %s: %s", file_path, e)
            except Exception:
                logger.exception("Failed to sync %s", file_path)

        result.deleted = self._store.cleanup_deleted_files(provider, files)
        return result

    def sync_all(self) -> SyncSummary:
        start = time.monotonic()
        summary = SyncSummary()
        for provider in Provider:
            summary.results[provider] = self.sync_provider(provider)
        summary.elapsed_ms = int((time.monotonic() - start) * 1000)

        logger.info(
            "Sync finished in %dms | %s",
            summary.elapsed_ms,
            " | ".join(
                f"{p.value}: +{r.added} ~{r.updated} -{r.deleted}"
                for p, r in summary.results.items()
            ),
        )
        return summary

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_sessions(self, provider: Provider) -> list[SessionRecord]:
        """Sessions of one provider, newest first, synced at most every debounce_s."""
        provider = Provider(provider)
        cached = self._snapshots.get(provider)
        last_sync = self._last_sync.get(provider)
        if (
            cached is not None
            and last_sync is not None
            and self._clock() - last_sync < self._debounce_s
        ):
            return list(cached)

        if not self.is_available(provider):
            return []

        # Sync, read and snapshot as one step so a concurrent sync cannot
        # leave a stale snapshot behind.
        with self._sync_lock:
            self._sync_provider(provider)
            self._last_sync[provider] = self._clock()
            sessions = self._store.list_sessions(provider)
            self._snapshots[provider] = sessions
        return list(sessions)

    def get_all_usage(self) -> UsageSnapshot:
        self.sync_all()
        return self.compute_usage()

    def compute_usage(self) -> UsageSnapshot:
        return compute_usage(self._store, {p: self.is_available(p) for p in Provider})

    def refresh(self) -> UsageSnapshot:
        """Drop cached snapshots and resync everything now."""
        self.clear_cache()
        return self.get_all_usage()

    def force_rebuild(self) -> SyncSummary:
        """Forget every parsed file and rebuild from scratch. Settings are kept."""
        logger.info("Force rebuilding usage store")
        with self._sync_lock:
            self._store.clear_all()
            self.clear_cache()
            self._last_sync = {}
        summary = self.sync_all()
        logger.info("Rebuild complete")
        return summary
