"""Parser for Codex CLI rollout files (~/.codex/sessions)."""

import logging
from pathlib import Path

import orjson

from llm_usage_tracker.parsers.base import (
    SessionParser,
    as_dict,
    as_int,
    as_str,
    iter_json_objects,
)
from llm_usage_tracker.types.sessions import Provider, SessionRecord
from llm_usage_tracker.utils.path_codec import project_from_cwd
from llm_usage_tracker.utils.pricing import cost_for

logger = logging.getLogger(__name__)

TOOL_CALL_TYPES = {"function_call", "custom_tool_call", "local_shell_call"}


class CodexParser(SessionParser):
    """Codex rollouts: ``token_count`` events carry cumulative totals.

    Only the last ``total_token_usage`` seen in a file is kept; summing the
    snapshots would count earlier turns again on every event.
    """

    provider = Provider.CODEX

    def parse_into(self, record: SessionRecord, path: Path):
        if path.suffix == ".jsonl":
            self._parse_events(record, path)
        else:
            self._parse_array(record, path)

        if record.input_tokens > 0 or record.output_tokens > 0:
            record.cost_usd = cost_for(record.input_tokens, record.output_tokens, record.model)

    def _parse_events(self, record: SessionRecord, path: Path):
        for event in iter_json_objects(path):
            record.messages += 1
            event_type = as_str(event.get("type"))
            payload = as_dict(event.get("payload"))
            payload_type = as_str(payload.get("type"))

            cwd = as_str(payload.get("cwd"))
            if event_type == "session_meta" and cwd:
                project = project_from_cwd(cwd)
                if project:
                    record.project = project

            if payload_type == "message":
                if payload.get("role") == "user":
                    record.user_messages += 1
                elif payload.get("role") == "assistant":
                    record.assistant_messages += 1
            elif event_type == "response_item" and payload_type in TOOL_CALL_TYPES:
                record.tool_uses += 1

            if event_type == "event_msg":
                if payload_type == "user_message":
                    record.user_messages += 1
                elif payload_type == "agent_message":
                    record.assistant_messages += 1
                elif payload_type == "token_count":
                    totals = as_dict(as_dict(payload.get("info")).get("total_token_usage"))
                    if totals:
                        record.input_tokens = as_int(totals.get("input_tokens"))
                        record.output_tokens = as_int(totals.get("output_tokens"))
                        record.cache_read_tokens = as_int(totals.get("cached_input_tokens"))

            model = as_str(payload.get("model"))
            if event_type == "turn_context" and model:
                record.model = model

            self.track_timestamp(record, event.get("timestamp") or event.get("created_at"))

    def _parse_array(self, record: SessionRecord, path: Path):
        try:
            data = orjson.loads(path.read_bytes())
        except orjson.JSONDecodeError as e:
            logger.warning("Malformed JSON in %s: %s", path.name, e)
            return

        if not isinstance(data, list):
            return
        record.messages = len(data)
        for item in data:
            if not isinstance(item, dict):
                continue
            if item.get("role") == "user":
                record.user_messages += 1
            elif item.get("role") == "assistant":
                record.assistant_messages += 1
