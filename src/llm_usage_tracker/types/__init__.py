"""Type definitions for LLM Usage Tracker."""

from llm_usage_tracker.types.sessions import Provider, FileRecord, SessionRecord
from llm_usage_tracker.types.usage import (
    BucketStats,
    DbStats,
    ProjectStats,
    ProviderStats,
    SyncResult,
    SyncSummary,
    UsageSnapshot,
    UsageTotals,
)

__all__ = [
    "Provider",
    "FileRecord",
    "SessionRecord",
    "BucketStats",
    "DbStats",
    "ProjectStats",
    "ProviderStats",
    "SyncResult",
    "SyncSummary",
    "UsageSnapshot",
    "UsageTotals",
]
