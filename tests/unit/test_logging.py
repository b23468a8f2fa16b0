"""Unit tests for the structlog processor chain.

Only ``build_processors`` is exercised here; ``configure_logging`` mutates
global structlog state that conftest pins for the whole test run.
"""

from __future__ import annotations

import json

import structlog

from story_recorder.utils.logging import build_processors


def _render(processors, event: str, **fields) -> str:
    event_dict = {"event": event, **fields}
    for processor in processors:
        event_dict = processor(None, "warning", event_dict)
    return event_dict


def test_json_output_renders_one_object_per_event():
    line = _render(build_processors(json_output=True), "relocate_retry", attempt=2, errno=16)

    payload = json.loads(line)
    assert payload["event"] == "relocate_retry"
    assert payload["attempt"] == 2
    assert payload["errno"] == 16
    assert payload["level"] == "warning"
    assert payload["timestamp"].endswith("Z")


def test_console_output_uses_console_renderer():
    processors = build_processors(json_output=False)
    assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
    assert "story_uploaded" in _render(processors, "story_uploaded", story_id="001")
