"""Unit tests for text processing and event logging helpers."""

import pytest

from atlas.utils.event_logging import get_recent_events, iter_events, log_pipeline_event
from atlas.utils.text_processing import (
    find_balanced_span,
    set_max_consecutive_blank_lines,
    tail,
    truncate_display,
)


@pytest.mark.unit
def test_find_balanced_span_nested():
    text = 'Here you go: {"a": {"b": 1}} trailing'
    start, end = find_balanced_span(text)
    assert text[start:end] == '{"a": {"b": 1}}'


@pytest.mark.unit
def test_find_balanced_span_skips_unclosed_opener():
    text = "{ never closed, but {\"ok\": true}"
    start, end = find_balanced_span(text)
    assert text[start:end] == '{"ok": true}'


@pytest.mark.unit
def test_find_balanced_span_none():
    assert find_balanced_span("no braces") is None
    assert find_balanced_span("{ open forever") is None


@pytest.mark.unit
def test_truncate_and_tail():
    assert truncate_display("short", 10) == "short"
    assert truncate_display("this is a very long string", 10) == "this is..."
    assert tail("abcdef", 3) == "def"
    assert tail("ab", 3) == "ab"


@pytest.mark.unit
def test_set_max_consecutive_blank_lines():
    assert set_max_consecutive_blank_lines("a\n\n\n\nb") == "a\n\nb"
    assert set_max_consecutive_blank_lines("a\n\n\nb", max_consecutive=0) == "a\nb"
    assert set_max_consecutive_blank_lines("a\n\nb") == "a\n\nb"


@pytest.mark.unit
def test_pipeline_events_round_trip(isolated_event_log):
    log_pipeline_event("state_change", "run-1", "optimization", state="extracting")
    log_pipeline_event("scored", "run-1", "optimization", score=72)
    log_pipeline_event("state_change", "run-2", "optimization", state="extracting")

    assert isolated_event_log.exists()
    assert [e["run_id"] for e in get_recent_events()] == ["run-1", "run-1", "run-2"]
    assert get_recent_events(run_id="run-1", event_type="scored")[0]["score"] == 72
    assert len(get_recent_events(n=1)) == 1


@pytest.mark.unit
def test_event_reader_skips_malformed_lines(isolated_event_log):
    assert get_recent_events() == []

    log_pipeline_event("run_started", "run-1", "optimization")
    with isolated_event_log.open("a", encoding="utf-8") as handle:
        handle.write("not json\n\n")
    log_pipeline_event("run_completed", "run-1", "optimization", success=True)

    assert [e["event_type"] for e in iter_events(run_id="run-1")] == [
        "run_started",
        "run_completed",
    ]
    assert list(iter_events(run_id="run-2")) == []
