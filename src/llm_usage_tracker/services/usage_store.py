"""SQLite store for file tracking, parsed sessions and settings."""

import logging
import os
import sqlite3
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable

from llm_usage_tracker.types import DbStats, FileRecord, Provider, SessionRecord

logger = logging.getLogger(__name__)

DATA_DIR = Path.home() / ".llm-usage-tracker"
DB_FILENAME = "cache.db"

_SESSION_COLUMNS = (
    "path", "provider", "session_id", "project", "messages", "user_messages",
    "assistant_messages", "tool_uses", "input_tokens", "output_tokens",
    "cache_read_tokens", "cache_creation_tokens", "cost_usd", "model",
    "first_message", "last_message", "duration",
)

_UPSERT_SESSION = f"""
    INSERT INTO sessions ({", ".join(_SESSION_COLUMNS)})
    VALUES ({", ".join("?" for _ in _SESSION_COLUMNS)})
    ON CONFLICT(path) DO UPDATE SET
    {", ".join(f"{c} = excluded.{c}" for c in _SESSION_COLUMNS if c != "path")}
"""

_ORDER_BY_LAST_MESSAGE = "ORDER BY last_message IS NULL, last_message DESC"


def _now_ms() -> int:
    return int(time.time() * 1000)


class UsageStore:
    """Persistent cache of parsed sessions, keyed by log file path.

    Every mutating call commits before it returns. A single connection is
    shared between threads; all access goes through ``_lock``.
    """

    def __init__(self, db_path: str | Path | None = None):
        if db_path is None:
            DATA_DIR.mkdir(parents=True, exist_ok=True)
            db_path = DATA_DIR / DB_FILENAME
        else:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db_path = str(db_path)
        self._lock = threading.RLock()
        self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA synchronous=FULL")
        self._conn.row_factory = sqlite3.Row
        self._create_tables()
        logger.info("Usage store opened at %s", self._db_path)

    @property
    def db_path(self) -> str:
        return self._db_path

    def _create_tables(self):
        with self._transaction() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS files (
                    path TEXT PRIMARY KEY,
                    provider TEXT NOT NULL,
                    mtime INTEGER NOT NULL,
                    size INTEGER NOT NULL,
                    last_parsed INTEGER NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS sessions (
                    path TEXT PRIMARY KEY,
                    provider TEXT NOT NULL,
                    session_id TEXT NOT NULL,
                    project TEXT,
                    messages INTEGER NOT NULL DEFAULT 0,
                    user_messages INTEGER NOT NULL DEFAULT 0,
                    assistant_messages INTEGER NOT NULL DEFAULT 0,
                    tool_uses INTEGER NOT NULL DEFAULT 0,
                    input_tokens INTEGER NOT NULL DEFAULT 0,
                    output_tokens INTEGER NOT NULL DEFAULT 0,
                    cache_read_tokens INTEGER NOT NULL DEFAULT 0,
                    cache_creation_tokens INTEGER NOT NULL DEFAULT 0,
                    cost_usd REAL NOT NULL DEFAULT 0,
                    model TEXT,
                    first_message TEXT,
                    last_message TEXT,
                    duration INTEGER NOT NULL DEFAULT 0
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at INTEGER NOT NULL
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_files_provider ON files(provider)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_sessions_provider ON sessions(provider)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_sessions_project ON sessions(project)")
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_sessions_last_message ON sessions(last_message)"
            )

    @contextmanager
    def _transaction(self):
        """Hold the lock and commit on success, roll back on error."""
        with self._lock:
            try:
                yield self._conn
                self._conn.commit()
            except BaseException:
                self._conn.rollback()
                raise

    # ------------------------------------------------------------------
    # File tracking
    # ------------------------------------------------------------------

    def get_file_record(self, path: str) -> FileRecord | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT * FROM files WHERE path = ?", (path,)
            ).fetchone()
        if row is None:
            return None
        return FileRecord(
            path=row["path"],
            provider=Provider(row["provider"]),
            mtime=row["mtime"],
            size=row["size"],
            last_parsed_at=row["last_parsed"],
        )

    def needs_reparse(self, path: str, mtime: int, size: int) -> bool:
        """True if the file is untracked or its mtime or size changed.

        Content is not hashed: a rewrite that keeps both mtime and size is
        not detected.
        """
        record = self.get_file_record(path)
        if record is None:
            return True
        return record.mtime != mtime or record.size != size

    def upsert_file_record(self, path: str, provider: Provider, mtime: int, size: int):
        with self._transaction() as conn:
            self._upsert_file(conn, path, provider, mtime, size)

    def list_tracked_paths(self, provider: Provider) -> set[str]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT path FROM files WHERE provider = ?", (Provider(provider).value,)
            ).fetchall()
        return {row["path"] for row in rows}

    def delete_file_and_session(self, path: str):
        with self._transaction() as conn:
            conn.execute("DELETE FROM files WHERE path = ?", (path,))
            conn.execute("DELETE FROM sessions WHERE path = ?", (path,))

    def cleanup_deleted_files(self, provider: Provider, existing: Iterable[str]) -> int:
        """Drop tracking and session rows for files no longer on disk."""
        existing = set(existing)
        with self._transaction() as conn:
            stale = [
                row["path"] for row in conn.execute(
                    "SELECT path FROM files WHERE provider = ?", (Provider(provider).value,)
                ).fetchall()
                if row["path"] not in existing
            ]
            for path in stale:
                conn.execute("DELETE FROM files WHERE path = ?", (path,))
                conn.execute("DELETE FROM sessions WHERE path = ?", (path,))
        if stale:
            logger.debug("Removed %d deleted %s files", len(stale), Provider(provider).value)
        return len(stale)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def upsert_session(self, session: SessionRecord):
        with self._transaction() as conn:
            conn.execute(_UPSERT_SESSION, self._session_params(session))

    def record_parse(self, session: SessionRecord, mtime: int, size: int) -> bool:
        """Store a parsed session and its file record together.

        Returns True if the file was not tracked before.
        """
        with self._transaction() as conn:
            is_new = conn.execute(
                "SELECT 1 FROM files WHERE path = ?", (session.path,)
            ).fetchone() is None
            conn.execute(_UPSERT_SESSION, self._session_params(session))
            self._upsert_file(conn, session.path, session.provider, mtime, size)
        return is_new

    def list_sessions(self, provider: Provider) -> list[SessionRecord]:
        with self._lock:
            rows = self._conn.execute(
                f"SELECT * FROM sessions WHERE provider = ? {_ORDER_BY_LAST_MESSAGE}",
                (Provider(provider).value,),
            ).fetchall()
        return [self._row_to_session(r) for r in rows]

    def list_all_sessions(self) -> list[SessionRecord]:
        with self._lock:
            rows = self._conn.execute(
                f"SELECT * FROM sessions {_ORDER_BY_LAST_MESSAGE}"
            ).fetchall()
        return [self._row_to_session(r) for r in rows]

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def get_setting(self, key: str, default: str = "") -> str:
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM settings WHERE key = ?", (key,)
            ).fetchone()
        return default if row is None else row["value"]

    def set_setting(self, key: str, value: str):
        with self._transaction() as conn:
            conn.execute("""
                INSERT INTO settings (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value, updated_at = excluded.updated_at
            """, (key, str(value), _now_ms()))

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def stats(self) -> DbStats:
        with self._lock:
            session_count = self._conn.execute("SELECT COUNT(*) FROM sessions").fetchone()[0]
            file_count = self._conn.execute("SELECT COUNT(*) FROM files").fetchone()[0]
        storage_bytes = 0
        for suffix in ("", "-wal"):
            try:
                storage_bytes += os.path.getsize(self._db_path + suffix)
            except OSError:
                pass
        return DbStats(
            session_count=session_count,
            file_count=file_count,
            storage_bytes=storage_bytes,
        )

    def clear_all(self):
        """Wipe tracked files and sessions. Settings are kept."""
        with self._transaction() as conn:
            conn.execute("DELETE FROM sessions")
            conn.execute("DELETE FROM files")

    def close(self):
        with self._lock:
            self._conn.close()

    # ------------------------------------------------------------------

    @staticmethod
    def _upsert_file(conn: sqlite3.Connection, path: str, provider: Provider, mtime: int, size: int):
        conn.execute("""
            INSERT INTO files (path, provider, mtime, size, last_parsed)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(path) DO UPDATE SET
                provider = excluded.provider, mtime = excluded.mtime,
                size = excluded.size, last_parsed = excluded.last_parsed
        """, (path, Provider(provider).value, int(mtime), int(size), _now_ms()))

    @staticmethod
    def _session_params(session: SessionRecord) -> tuple:
        return (
            session.path, Provider(session.provider).value, session.session_id,
            session.project or None, session.messages, session.user_messages,
            session.assistant_messages, session.tool_uses, session.input_tokens,
            session.output_tokens, session.cache_read_tokens,
            session.cache_creation_tokens, session.cost_usd, session.model,
            session.first_message, session.last_message, session.duration,
        )

    @staticmethod
    def _row_to_session(row: sqlite3.Row) -> SessionRecord:
        return SessionRecord(
            path=row["path"],
            provider=Provider(row["provider"]),
            session_id=row["session_id"],
            project=row["project"],
            messages=row["messages"],
            user_messages=row["user_messages"],
            assistant_messages=row["assistant_messages"],
            tool_uses=row["tool_uses"],
            input_tokens=row["input_tokens"],
            output_tokens=row["output_tokens"],
            cache_read_tokens=row["cache_read_tokens"],
            cache_creation_tokens=row["cache_creation_tokens"],
            cost_usd=row["cost_usd"],
            model=row["model"],
            first_message=row["first_message"],
            last_message=row["last_message"],
            duration=row["duration"],
        )
