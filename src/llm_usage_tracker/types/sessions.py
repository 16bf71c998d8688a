"""Session and file-tracking record types."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Provider(str, Enum):
    CLAUDE = "claude"
    CODEX = "codex"
    GEMINI = "gemini"


@dataclass
class FileRecord:
    """Last-seen metadata of a log file that has been ingested."""
    path: str
    provider: Provider
    mtime: int          # epoch millis
    size: int           # bytes
    last_parsed_at: int = 0


@dataclass
class SessionRecord:
    path: str
    provider: Provider
    session_id: str
    project: Optional[str] = None
    messages: int = 0
    user_messages: int = 0
    assistant_messages: int = 0
    tool_uses: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0
    cache_creation_tokens: int = 0
    cost_usd: float = 0.0
    model: Optional[str] = None
    first_message: Optional[str] = None   # ISO-8601
    last_message: Optional[str] = None    # ISO-8601
    duration: int = 0                     # ms

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "provider": self.provider.value,
            "sessionId": self.session_id,
            "project": self.project,
            "messages": self.messages,
            "userMessages": self.user_messages,
            "assistantMessages": self.assistant_messages,
            "toolUses": self.tool_uses,
            "inputTokens": self.input_tokens,
            "outputTokens": self.output_tokens,
            "cacheReadTokens": self.cache_read_tokens,
            "cacheCreationTokens": self.cache_creation_tokens,
            "costUsd": self.cost_usd,
            "model": self.model,
            "firstMessage": self.first_message,
            "lastMessage": self.last_message,
            "duration": self.duration,
        }
