"""Shared test fixtures for LLM Usage Tracker."""

import os
import sys
from pathlib import Path

import pytest

from llm_usage_tracker.services.sync_engine import SyncEngine
from llm_usage_tracker.services.usage_store import UsageStore
from llm_usage_tracker.types import Provider


@pytest.fixture(scope="session")
def qapp():
    """Create a QGuiApplication for tests that need Qt."""
    os.environ["QT_QPA_PLATFORM"] = "offscreen"
    from PySide6.QtGui import QGuiApplication

    app = QGuiApplication.instance()
    if app is None:
        app = QGuiApplication(sys.argv or ["test"])
    yield app


@pytest.fixture
def provider_roots(tmp_path) -> dict[Provider, Path]:
    """Create empty log directories laid out like the real providers."""
    roots = {
        Provider.CLAUDE: tmp_path / ".claude" / "projects",
        Provider.CODEX: tmp_path / ".codex" / "sessions",
        Provider.GEMINI: tmp_path / ".gemini" / "tmp",
    }
    for root in roots.values():
        root.mkdir(parents=True)
    return roots


@pytest.fixture
def claude_project_dir(provider_roots) -> Path:
    project_dir = provider_roots[Provider.CLAUDE] / "-home-wiz-projects-myapp"
    project_dir.mkdir()
    return project_dir


@pytest.fixture
def store(tmp_path):
    s = UsageStore(db_path=tmp_path / "data" / "cache.db")
    yield s
    s.close()


@pytest.fixture
def engine(store, provider_roots) -> SyncEngine:
    return SyncEngine(store, roots=provider_roots)
