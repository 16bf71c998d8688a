"""Roll stored sessions up into a UsageSnapshot."""

from collections.abc import Mapping

from llm_usage_tracker.services.usage_store import UsageStore
from llm_usage_tracker.types import (
    BucketStats,
    ProjectStats,
    Provider,
    ProviderStats,
    SessionRecord,
    UsageSnapshot,
)
from llm_usage_tracker.utils.timestamps import to_epoch_ms, utc_date_key

RECENT_PER_PROVIDER = 10
RECENT_TOTAL = 20
UNKNOWN_MODEL = "unknown"


def compute_usage(store: UsageStore, available: Mapping[Provider, bool]) -> UsageSnapshot:
    """Aggregate every stored session.

    ``available`` says which providers have a log directory on disk; it is
    reported as-is, independent of whether any sessions were found.
    """
    usage = UsageSnapshot()
    recent: list[SessionRecord] = []

    for provider in Provider:
        sessions = store.list_sessions(provider)
        stats = ProviderStats(sessions=len(sessions), available=bool(available.get(provider)))

        for session in sessions:
            stats.messages += session.messages
            stats.input_tokens += session.input_tokens
            stats.output_tokens += session.output_tokens
            stats.cost_usd += session.cost_usd

            model = session.model or UNKNOWN_MODEL
            usage.by_model.setdefault(model, BucketStats()).add(session)

            date_key = utc_date_key(session.last_message) if session.last_message else None
            if date_key:
                usage.by_date.setdefault(date_key, BucketStats()).add(session)

            _add_to_project(usage, provider, session)

        usage.providers[provider] = stats
        usage.totals.sessions += stats.sessions
        usage.totals.messages += stats.messages
        usage.totals.input_tokens += stats.input_tokens
        usage.totals.output_tokens += stats.output_tokens
        usage.totals.cost_usd += stats.cost_usd

        # list_sessions is already newest first
        recent.extend(sessions[:RECENT_PER_PROVIDER])

    usage.totals.total_tokens = usage.totals.input_tokens + usage.totals.output_tokens

    recent.sort(key=lambda s: to_epoch_ms(s.last_message), reverse=True)
    usage.recent_sessions = recent[:RECENT_TOTAL]
    return usage


def _add_to_project(usage: UsageSnapshot, provider: Provider, session: SessionRecord):
    name = session.project or f"{provider.value}-sessions"
    project = usage.by_project.get(name)
    if project is None:
        project = usage.by_project[name] = ProjectStats(provider=provider)

    project.sessions += 1
    project.messages += session.messages
    project.input_tokens += session.input_tokens
    project.output_tokens += session.output_tokens
    project.cost_usd += session.cost_usd

    if session.last_message and (
        project.last_activity is None
        or to_epoch_ms(session.last_message) > to_epoch_ms(project.last_activity)
    ):
        project.last_activity = session.last_message
