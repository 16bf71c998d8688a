"""Aggregate usage types produced by the aggregator and sync engine."""

from dataclasses import dataclass, field
from typing import Optional

from llm_usage_tracker.types.sessions import Provider, SessionRecord


@dataclass
class ProviderStats:
    sessions: int = 0
    messages: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    cost_usd: float = 0.0
    available: bool = False

    def to_dict(self) -> dict:
        return {
            "sessions": self.sessions,
            "messages": self.messages,
            "inputTokens": self.input_tokens,
            "outputTokens": self.output_tokens,
            "costUsd": self.cost_usd,
            "available": self.available,
        }


@dataclass
class BucketStats:
    """Roll-up used for both the per-model and per-date views."""
    sessions: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    cost_usd: float = 0.0

    def add(self, session: SessionRecord):
        self.sessions += 1
        self.input_tokens += session.input_tokens
        self.output_tokens += session.output_tokens
        self.cost_usd += session.cost_usd

    def to_dict(self) -> dict:
        return {
            "sessions": self.sessions,
            "inputTokens": self.input_tokens,
            "outputTokens": self.output_tokens,
            "costUsd": self.cost_usd,
        }


@dataclass
class ProjectStats:
    provider: Provider
    sessions: int = 0
    messages: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    cost_usd: float = 0.0
    last_activity: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "sessions": self.sessions,
            "messages": self.messages,
            "inputTokens": self.input_tokens,
            "outputTokens": self.output_tokens,
            "costUsd": self.cost_usd,
            "provider": self.provider.value,
            "lastActivity": self.last_activity,
        }


@dataclass
class UsageTotals:
    sessions: int = 0
    messages: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    cost_usd: float = 0.0

    def to_dict(self) -> dict:
        return {
            "sessions": self.sessions,
            "messages": self.messages,
            "inputTokens": self.input_tokens,
            "outputTokens": self.output_tokens,
            "totalTokens": self.total_tokens,
            "costUsd": self.cost_usd,
        }


@dataclass
class UsageSnapshot:
    providers: dict[Provider, ProviderStats] = field(default_factory=dict)
    totals: UsageTotals = field(default_factory=UsageTotals)
    by_model: dict[str, BucketStats] = field(default_factory=dict)
    by_date: dict[str, BucketStats] = field(default_factory=dict)
    by_project: dict[str, ProjectStats] = field(default_factory=dict)
    recent_sessions: list[SessionRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "providers": {p.value: s.to_dict() for p, s in self.providers.items()},
            "totals": self.totals.to_dict(),
            "byModel": {k: v.to_dict() for k, v in self.by_model.items()},
            "byDate": {k: v.to_dict() for k, v in self.by_date.items()},
            "byProject": {k: v.to_dict() for k, v in self.by_project.items()},
            "recentSessions": [s.to_dict() for s in self.recent_sessions],
        }


@dataclass
class SyncResult:
    added: int = 0
    updated: int = 0
    deleted: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.added or self.updated or self.deleted)

    def to_dict(self) -> dict:
        return {"added": self.added, "updated": self.updated, "deleted": self.deleted}


@dataclass
class SyncSummary:
    results: dict[Provider, SyncResult] = field(default_factory=dict)
    elapsed_ms: int = 0

    def to_dict(self) -> dict:
        data = {p.value: r.to_dict() for p, r in self.results.items()}
        data["duration"] = self.elapsed_ms
        return data


@dataclass
class DbStats:
    session_count: int = 0
    file_count: int = 0
    storage_bytes: int = 0

    def to_dict(self) -> dict:
        return {
            "sessionCount": self.session_count,
            "fileCount": self.file_count,
            "dbSize": self.storage_bytes,
        }
