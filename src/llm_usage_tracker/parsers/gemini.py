"""Parser for Gemini CLI session logs (~/.gemini/tmp)."""

import logging
from pathlib import Path
from typing import Iterable

import orjson

from llm_usage_tracker.parsers.base import (
    SessionParser,
    as_dict,
    as_int,
    as_str,
    iter_json_objects,
)
from llm_usage_tracker.types.sessions import Provider, SessionRecord
from llm_usage_tracker.utils.pricing import cost_for

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"


class GeminiParser(SessionParser):
    provider = Provider.GEMINI

    def new_record(self, path: Path) -> SessionRecord:
        record = super().new_record(path)
        record.model = DEFAULT_MODEL
        return record

    def parse_into(self, record: SessionRecord, path: Path):
        if path.suffix == ".json":
            events = self._load_document(path)
        else:
            events = iter_json_objects(path)

        for event in events:
            record.messages += 1

            role = as_str(event.get("role"))
            if role == "user":
                record.user_messages += 1
            elif role == "model":
                record.assistant_messages += 1

            parts = event.get("parts")
            if isinstance(parts, list) and any(
                isinstance(part, dict) and part.get("functionCall") for part in parts
            ):
                record.tool_uses += 1

            usage = as_dict(event.get("usageMetadata"))
            record.input_tokens += as_int(usage.get("promptTokenCount"))
            record.output_tokens += as_int(usage.get("candidatesTokenCount"))
            record.cache_read_tokens += as_int(usage.get("cachedContentTokenCount"))

            model = as_str(event.get("model"))
            if model:
                record.model = model

            self.track_timestamp(record, event.get("timestamp") or event.get("createTime"))

        if record.input_tokens > 0 or record.output_tokens > 0:
            record.cost_usd = cost_for(record.input_tokens, record.output_tokens, record.model)

    def _load_document(self, path: Path) -> Iterable[dict]:
        """Whole-file JSON: either an event array or an object with ``messages``."""
        try:
            data = orjson.loads(path.read_bytes())
        except orjson.JSONDecodeError:
            # Some .json logs are newline-delimited after all.
            return list(iter_json_objects(path))

        if isinstance(data, dict):
            data = data.get("messages")
        if not isinstance(data, list):
            return []
        return [item for item in data if isinstance(item, dict)]
