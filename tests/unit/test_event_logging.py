"""Unit tests for JSON Lines pipeline event logging."""

import json

import pytest

from texpress.utils.event_logging import get_recent_events, log_pipeline_event


@pytest.mark.unit
def test_log_pipeline_event_appends_json_lines(tmp_path):
    events_file = tmp_path / "nested" / "events.log"

    log_pipeline_event(events_file, "pdf_published", "paper.tex", "rendering", pdf_path="paper.pdf")
    log_pipeline_event(events_file, "compile_failed", "notes.tex", "rendering")

    lines = events_file.read_text().splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["event_type"] == "pdf_published"
    assert first["pdf_path"] == "paper.pdf"
    assert "timestamp" in first


@pytest.mark.unit
def test_get_recent_events_filters(tmp_path):
    events_file = tmp_path / "events.log"
    for i in range(5):
        log_pipeline_event(events_file, "pdf_published", f"doc{i % 2}.tex", "rendering", n=i)
    with open(events_file, "a") as f:
        f.write("not json\n")

    assert [e["n"] for e in get_recent_events(events_file, n=2)] == [3, 4]
    assert [e["n"] for e in get_recent_events(events_file, target="doc1.tex")] == [1, 3]
    assert get_recent_events(events_file, event_type="compile_failed") == []


@pytest.mark.unit
def test_get_recent_events_missing_file(tmp_path):
    assert get_recent_events(tmp_path / "missing.log") == []
