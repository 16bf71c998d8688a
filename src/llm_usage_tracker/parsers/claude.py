"""Parser for Claude Code session files (~/.claude/projects)."""

import logging
from pathlib import Path

from llm_usage_tracker.parsers.base import (
    SessionParser,
    as_dict,
    as_float,
    as_int,
    as_str,
    iter_json_objects,
)
from llm_usage_tracker.types.sessions import Provider, SessionRecord
from llm_usage_tracker.utils.path_codec import project_label
from llm_usage_tracker.utils.pricing import cost_for

logger = logging.getLogger(__name__)

COST_FIELDS = ("costUSD", "costUsd")


class ClaudeParser(SessionParser):
    """Claude Code JSONL: one event per line, usage counters are additive.

    Layout is ``<root>/<encoded-project-path>/<session>.jsonl`` where the
    encoded path looks like ``-home-wiz-trees-project``.
    """

    provider = Provider.CLAUDE

    def __init__(self, root_dir: str | Path | None = None):
        self._root_dir = Path(root_dir) if root_dir else None

    def session_id_for(self, path: Path) -> str:
        return path.parent.name

    def project_for(self, path: Path) -> str:
        encoded = path.parent.name
        if self._root_dir is not None:
            try:
                encoded = path.relative_to(self._root_dir).parts[0]
            except (ValueError, IndexError):
                pass
        return project_label(encoded) if encoded else "Unknown"

    def parse_into(self, record: SessionRecord, path: Path):
        record.project = self.project_for(path)
        embedded_cost = 0.0

        for event in iter_json_objects(path):
            record.messages += 1
            message = as_dict(event.get("message"))

            event_type = as_str(event.get("type"))
            role = as_str(message.get("role")) or as_str(event.get("role"))
            if event_type == "user" or role == "user":
                record.user_messages += 1
            elif event_type == "assistant" or role == "assistant":
                record.assistant_messages += 1

            if _has_tool_use(event, message):
                record.tool_uses += 1

            usage = as_dict(message.get("usage") or event.get("usage"))
            record.input_tokens += as_int(usage.get("input_tokens"))
            record.output_tokens += as_int(usage.get("output_tokens"))
            record.cache_read_tokens += as_int(usage.get("cache_read_input_tokens"))
            record.cache_creation_tokens += as_int(usage.get("cache_creation_input_tokens"))

            for key in COST_FIELDS:
                embedded_cost += as_float(event.get(key))

            self.track_timestamp(record, event.get("timestamp") or event.get("ts"))

            model = as_str(message.get("model")) or as_str(event.get("model"))
            if model:
                record.model = model

        # A zero embedded cost is treated as missing.
        record.cost_usd = embedded_cost
        if embedded_cost == 0 and (record.input_tokens or record.output_tokens):
            record.cost_usd = cost_for(record.input_tokens, record.output_tokens, record.model)


def _has_tool_use(event: dict, message: dict) -> bool:
    if event.get("type") == "tool_use" or event.get("tool_use"):
        return True
    content = message.get("content")
    if isinstance(content, list):
        return any(
            isinstance(block, dict) and block.get("type") == "tool_use"
            for block in content
        )
    return False
