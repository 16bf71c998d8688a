"""Services for LLM Usage Tracker."""

from llm_usage_tracker.services.usage_store import UsageStore
from llm_usage_tracker.services.sync_engine import SyncEngine, SESSION_DIRS
from llm_usage_tracker.services.aggregator import compute_usage
from llm_usage_tracker.services.file_scanner import list_session_files
from llm_usage_tracker.services.config_manager import ConfigManager
from llm_usage_tracker.services.usage_service import UsageService

__all__ = [
    "UsageStore",
    "SyncEngine",
    "SESSION_DIRS",
    "compute_usage",
    "list_session_files",
    "ConfigManager",
    "UsageService",
]
