"""Recursive discovery of provider session log files."""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

SESSION_EXTENSIONS = (".jsonl", ".json")


def list_session_files(
    root_dir: str | Path,
    extensions: tuple[str, ...] = SESSION_EXTENSIONS,
) -> list[str]:
    """List log files under root_dir, newest first.

    Unreadable directories are skipped. A file whose stat fails while
    sorting is ordered as if its mtime were 0.
    """
    root = Path(root_dir)
    if not root.is_dir():
        return []

    files = []
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        for name in filenames:
            if name.endswith(extensions):
                files.append(os.path.join(dirpath, name))

    files.sort(key=_mtime_or_zero, reverse=True)
    return files


def _mtime_or_zero(path: str) -> float:
    try:
        return os.stat(path).st_mtime
    except OSError:
        return 0.0


def _log_walk_error(error: OSError):
    logger.debug("Skipping unreadable directory %s: %s", error.filename, error)
