"""Shared test helpers."""

import json
from pathlib import Path

from PySide6.QtCore import QCoreApplication


def wait_for_worker(service):
    """Wait for a background refresh to finish and deliver its signal."""
    if service._worker is not None:
        service._worker.wait(5000)
    for _ in range(5):
        QCoreApplication.processEvents()


def write_jsonl(path: Path, events: list[dict]) -> Path:
    """Write one JSON object per line."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(json.dumps(e) for e in events) + "\n")
    return path


def claude_event(
    msg_type="assistant",
    input_tokens=0,
    output_tokens=0,
    timestamp="2024-01-01T00:00:00Z",
    model="claude-sonnet-4-20250514",
    content=None,
    **extra,
) -> dict:
    event = {
        "type": msg_type,
        "timestamp": timestamp,
        "message": {
            "role": msg_type,
            "model": model,
            "content": content if content is not None else "hi",
            "usage": {"input_tokens": input_tokens, "output_tokens": output_tokens},
        },
    }
    event.update(extra)
    return event


def codex_token_count(input_tokens, output_tokens, timestamp="2024-01-01T00:00:00Z", cached=0) -> dict:
    return {
        "timestamp": timestamp,
        "type": "event_msg",
        "payload": {
            "type": "token_count",
            "info": {
                "total_token_usage": {
                    "input_tokens": input_tokens,
                    "cached_input_tokens": cached,
                    "output_tokens": output_tokens,
                },
            },
        },
    }


def gemini_event(role="model", prompt=0, candidates=0, timestamp=None, **extra) -> dict:
    event = {
        "role": role,
        "parts": [{"text": "hi"}],
        "usageMetadata": {"promptTokenCount": prompt, "candidatesTokenCount": candidates},
    }
    if timestamp:
        event["timestamp"] = timestamp
    event.update(extra)
    return event
