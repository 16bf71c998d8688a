"""Tests for llm_usage_tracker.services.aggregator."""

import pytest

from llm_usage_tracker.services.aggregator import RECENT_TOTAL, compute_usage
from llm_usage_tracker.types import Provider, SessionRecord

ALL_AVAILABLE = {p: True for p in Provider}


def _session(path, provider=Provider.CLAUDE, project="wiz/app", model="claude-sonnet-4",
             last_message="2024-01-01T12:00:00Z", input_tokens=100, output_tokens=50,
             cost_usd=0.5, messages=4) -> SessionRecord:
    return SessionRecord(
        path=path,
        provider=provider,
        session_id=path.rsplit("/", 1)[-1],
        project=project,
        messages=messages,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        cost_usd=cost_usd,
        model=model,
        first_message=last_message,
        last_message=last_message,
    )


def _store_all(store, *sessions):
    for s in sessions:
        store.upsert_session(s)


class TestProviders:
    def test_empty_store(self, store):
        usage = compute_usage(store, ALL_AVAILABLE)
        assert set(usage.providers) == set(Provider)
        assert usage.totals.sessions == 0
        assert usage.totals.total_tokens == 0
        assert usage.by_model == {}
        assert usage.recent_sessions == []

    def test_availability_reported_as_given(self, store):
        _store_all(store, _session("/c/1"))
        usage = compute_usage(store, {Provider.CLAUDE: False, Provider.CODEX: True})
        assert usage.providers[Provider.CLAUDE].available is False
        assert usage.providers[Provider.CLAUDE].sessions == 1
        assert usage.providers[Provider.CODEX].available is True
        assert usage.providers[Provider.GEMINI].available is False

    def test_totals(self, store):
        _store_all(
            store,
            _session("/c/1", input_tokens=100, output_tokens=50, cost_usd=0.5, messages=4),
            _session("/x/1", provider=Provider.CODEX, input_tokens=400, output_tokens=200,
                     cost_usd=1.25, messages=10),
        )
        usage = compute_usage(store, ALL_AVAILABLE)
        assert usage.providers[Provider.CODEX].input_tokens == 400
        assert usage.totals.sessions == 2
        assert usage.totals.messages == 14
        assert usage.totals.input_tokens == 500
        assert usage.totals.output_tokens == 250
        assert usage.totals.total_tokens == 750
        assert usage.totals.cost_usd == pytest.approx(1.75)


class TestBuckets:
    def test_by_model_with_unknown(self, store):
        _store_all(
            store,
            _session("/c/1", model="claude-sonnet-4"),
            _session("/c/2", model="claude-sonnet-4"),
            _session("/c/3", model=None),
        )
        usage = compute_usage(store, ALL_AVAILABLE)
        assert usage.by_model["claude-sonnet-4"].sessions == 2
        assert usage.by_model["claude-sonnet-4"].input_tokens == 200
        assert usage.by_model["unknown"].sessions == 1

    def test_by_date_uses_utc_and_skips_undated(self, store):
        _store_all(
            store,
            _session("/c/1", last_message="2024-01-01T23:30:00-05:00"),
            _session("/c/2", last_message="2024-01-02T08:00:00Z"),
            _session("/c/3", last_message=None),
        )
        usage = compute_usage(store, ALL_AVAILABLE)
        assert list(usage.by_date) == ["2024-01-02"]
        assert usage.by_date["2024-01-02"].sessions == 2
        assert sum(b.sessions for b in usage.by_date.values()) == 2

    def test_by_project(self, store):
        _store_all(
            store,
            _session("/c/1", project="wiz/app", last_message="2024-01-03T00:00:00Z"),
            _session("/c/2", project="wiz/app", last_message="2024-01-01T00:00:00Z"),
        )
        project = compute_usage(store, ALL_AVAILABLE).by_project["wiz/app"]
        assert project.sessions == 2
        assert project.provider == Provider.CLAUDE
        assert project.last_activity == "2024-01-03T00:00:00Z"

    def test_project_fallback_name(self, store):
        _store_all(
            store,
            _session("/x/1", provider=Provider.CODEX, project=None),
            _session("/g/1", provider=Provider.GEMINI, project=None),
        )
        usage = compute_usage(store, ALL_AVAILABLE)
        assert usage.by_project["codex-sessions"].sessions == 1
        assert usage.by_project["gemini-sessions"].provider == Provider.GEMINI

    def test_undated_sessions_keep_last_activity(self, store):
        _store_all(
            store,
            _session("/c/1", last_message="2024-01-03T00:00:00Z"),
            _session("/c/2", last_message=None),
        )
        project = compute_usage(store, ALL_AVAILABLE).by_project["wiz/app"]
        assert project.sessions == 2
        assert project.last_activity == "2024-01-03T00:00:00Z"


class TestRecentSessions:
    def test_capped_and_newest_first(self, store):
        for provider in Provider:
            for day in range(1, 13):
                _store_all(store, _session(
                    f"/{provider.value}/{day}",
                    provider=provider,
                    last_message=f"2024-01-{day:02d}T00:00:00Z",
                ))
        recent = compute_usage(store, ALL_AVAILABLE).recent_sessions
        assert len(recent) == RECENT_TOTAL
        stamps = [s.last_message for s in recent]
        assert stamps == sorted(stamps, reverse=True)
        # Each provider contributes at most its ten newest
        assert all(s.last_message >= "2024-01-03" for s in recent)

    def test_undated_last(self, store):
        _store_all(
            store,
            _session("/c/1", last_message=None),
            _session("/c/2", last_message="2024-01-01T00:00:00Z"),
            _session("/x/1", provider=Provider.CODEX, last_message="2024-02-01T00:00:00Z"),
        )
        recent = compute_usage(store, ALL_AVAILABLE).recent_sessions
        assert [s.path for s in recent] == ["/x/1", "/c/2", "/c/1"]

    def test_to_dict_shape(self, store):
        _store_all(store, _session("/c/1"))
        data = compute_usage(store, ALL_AVAILABLE).to_dict()
        assert set(data) == {"providers", "totals", "byModel", "byDate", "byProject", "recentSessions"}
        assert data["providers"]["claude"]["available"] is True
        assert data["totals"]["totalTokens"] == 150
        assert data["recentSessions"][0]["provider"] == "claude"
