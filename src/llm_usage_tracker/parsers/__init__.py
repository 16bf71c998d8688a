"""Per-provider session log parsers."""

from pathlib import Path

from llm_usage_tracker.parsers.base import SessionParser
from llm_usage_tracker.parsers.claude import ClaudeParser
from llm_usage_tracker.parsers.codex import CodexParser
from llm_usage_tracker.parsers.gemini import GeminiParser
from llm_usage_tracker.types.sessions import Provider


def create_parsers(roots: dict[Provider, Path] | None = None) -> dict[Provider, SessionParser]:
    """Build the provider → parser mapping used by the sync engine."""
    roots = roots or {}
    return {
        Provider.CLAUDE: ClaudeParser(roots.get(Provider.CLAUDE)),
        Provider.CODEX: CodexParser(),
        Provider.GEMINI: GeminiParser(),
    }


__all__ = [
    "SessionParser",
    "ClaudeParser",
    "CodexParser",
    "GeminiParser",
    "create_parsers",
]
