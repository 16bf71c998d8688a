"""Timestamp parsing helpers shared by the parsers and the aggregator."""

import re
from datetime import datetime, timezone

# fromisoformat on 3.10 only takes 3 or 6 fractional digits
_FRACTION = re.compile(r"(\d{2}:\d{2}:\d{2})\.(\d+)")


def _pad_fraction(match: re.Match) -> str:
    return f"{match.group(1)}.{match.group(2)[:6].ljust(6, '0')}"


def parse_timestamp(ts_value) -> datetime | None:
    """Parse an ISO-8601 string or a numeric epoch (seconds or millis).

    Naive values are taken as UTC. Returns None for anything unparseable.
    """
    if isinstance(ts_value, bool):
        return None
    if isinstance(ts_value, (int, float)):
        try:
            seconds = ts_value / 1000 if ts_value > 1e12 else ts_value
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(ts_value, str) and ts_value:
        try:
            # "2026-02-13T12:00:00.000Z"
            text = _FRACTION.sub(_pad_fraction, ts_value.replace("Z", "+00:00"), count=1)
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt
    return None


def normalize_timestamp(ts_value) -> str | None:
    """Keep ISO strings as written; convert numeric epochs to ISO-8601 UTC."""
    if isinstance(ts_value, str):
        return ts_value or None
    dt = parse_timestamp(ts_value)
    if dt is None:
        return None
    return dt.isoformat().replace("+00:00", "Z")


def to_epoch_ms(ts_value) -> int:
    """Epoch milliseconds of a timestamp, 0 when absent or unparseable."""
    dt = parse_timestamp(ts_value)
    if dt is None:
        return 0
    return int(dt.timestamp() * 1000)


def duration_ms(first, last) -> int:
    """Milliseconds between two timestamps, floored at 0."""
    start = parse_timestamp(first)
    end = parse_timestamp(last)
    if start is None or end is None:
        return 0
    return max(0, int((end - start).total_seconds() * 1000))


def utc_date_key(ts_value) -> str | None:
    """UTC calendar date (YYYY-MM-DD) of a timestamp."""
    dt = parse_timestamp(ts_value)
    if dt is None:
        return None
    return dt.astimezone(timezone.utc).date().isoformat()
