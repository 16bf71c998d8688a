"""Shared machinery for the per-provider session log parsers."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator

import orjson

from llm_usage_tracker.types.sessions import Provider, SessionRecord
from llm_usage_tracker.utils.timestamps import duration_ms, normalize_timestamp

logger = logging.getLogger(__name__)

# Max size for a single JSONL line (10MB)
MAX_LINE_SIZE = 10 * 1024 * 1024


def iter_json_objects(path: Path) -> Iterator[dict]:
    """Stream the JSON objects of a JSONL file.

    Blank, oversized, malformed and non-object lines are skipped.
    Raises OSError if the file cannot be opened.
    """
    line_num = 0
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for line in f:
            line_num += 1
            line = line.strip()
            if not line:
                continue

            if len(line) > MAX_LINE_SIZE:
                logger.warning(
                    "Line %d in %s exceeds %dMB, skipping",
                    line_num, path.name, MAX_LINE_SIZE // (1024 * 1024),
                )
                continue

            try:
                raw = orjson.loads(line)
            except orjson.JSONDecodeError as e:
                logger.debug("Malformed JSON at line %d in %s: %s", line_num, path.name, e)
                continue

            if not isinstance(raw, dict):
                continue
            yield raw


def as_dict(value) -> dict:
    return value if isinstance(value, dict) else {}


def as_str(value) -> str:
    return value if isinstance(value, str) else ""


def as_int(value) -> int:
    """Coerce a token counter to a non-negative int; junk counts as 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return max(0, int(value))


def as_float(value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


class SessionParser(ABC):
    """Turns one provider log file into a SessionRecord.

    ``parse`` never raises for bad input: unparseable lines are skipped and
    a file that cannot be read yields a zero-valued record.
    """

    provider: Provider

    def parse(self, file_path: str | Path) -> SessionRecord:
        path = Path(file_path)
        record = self.new_record(path)
        try:
            self.parse_into(record, path)
        except OSError as e:
            logger.warning("Error parsing %s: %s", path, e)
            return self.new_record(path)
        record.duration = duration_ms(record.first_message, record.last_message)
        return record

    def new_record(self, path: Path) -> SessionRecord:
        return SessionRecord(
            path=str(path),
            provider=self.provider,
            session_id=self.session_id_for(path),
        )

    def session_id_for(self, path: Path) -> str:
        return path.stem

    @abstractmethod
    def parse_into(self, record: SessionRecord, path: Path):
        """Fill ``record`` from the file contents."""

    @staticmethod
    def track_timestamp(record: SessionRecord, ts_value):
        ts = normalize_timestamp(ts_value)
        if ts is None:
            return
        if record.first_message is None:
            record.first_message = ts
        record.last_message = ts
