from __future__ import annotations

from datetime import datetime, timezone

from chrono_mcp.components import CandidateMatch, ComponentSet
from chrono_mcp.projector import (
    NO_RESULTS_SUMMARY,
    format_offset,
    partition_fields,
    project,
    render_iso,
    summarize,
    unix_millis,
)
from chrono_mcp.schema import ParsedDateTime, ParseResultEntry


def _components(day: int, hour: int = 12) -> ComponentSet:
    c = ComponentSet(reference_offset=0)
    c.imply("year", 2025)
    c.assign("month", 3)
    c.assign("day", day)
    c.assign("hour", hour)
    c.imply("minute", 0)
    c.imply("second", 0)
    c.imply("millisecond", 0)
    return c


def _entry(iso: str, end_iso: str | None = None) -> ParseResultEntry:
    start = ParsedDateTime(iso=iso, unix_millis=0, detected_offset_minutes=None)
    end = ParsedDateTime(iso=end_iso, unix_millis=0, detected_offset_minutes=None) if end_iso else None
    return ParseResultEntry(matched_text="x", start=start, end=end)


def test_format_offset() -> None:
    assert format_offset(0) == "+00:00"
    assert format_offset(540) == "+09:00"
    assert format_offset(-300) == "-05:00"
    assert format_offset(570) == "+09:30"
    assert format_offset(330) == "+05:30"
    assert format_offset(-210) == "-03:30"


def test_render_iso_shifts_linearly() -> None:
    instant = datetime(2025, 10, 5, 8, 0, tzinfo=timezone.utc)
    assert render_iso(instant, 540) == "2025-10-05T17:00:00.000+09:00"
    assert render_iso(instant, 0) == "2025-10-05T08:00:00.000+00:00"


def test_render_iso_crosses_day_boundary() -> None:
    instant = datetime(2025, 1, 1, 2, 0, tzinfo=timezone.utc)
    assert render_iso(instant, -300) == "2024-12-31T21:00:00.000-05:00"


def test_render_iso_keeps_milliseconds() -> None:
    instant = datetime(2025, 3, 15, 14, 30, 0, 250000, tzinfo=timezone.utc)
    assert render_iso(instant, 0) == "2025-03-15T14:30:00.250+00:00"


def test_render_iso_denotes_same_instant() -> None:
    instant = datetime(2025, 3, 15, 14, 30, tzinfo=timezone.utc)
    for offset in (0, 330, 570, -210, -300, 840):
        assert datetime.fromisoformat(render_iso(instant, offset)) == instant


def test_unix_millis() -> None:
    assert unix_millis(datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)) == 1000
    assert unix_millis(datetime(1969, 12, 31, 23, 59, 59, 999000, tzinfo=timezone.utc)) == -1
    assert unix_millis(datetime(2025, 10, 5, 8, 0, tzinfo=timezone.utc)) == 1759651200000


def test_partition_fields_is_disjoint_and_ordered() -> None:
    certain, implied = partition_fields(_components(15))
    assert certain == ("month", "day", "hour")
    assert implied == ("year", "minute", "second", "millisecond")
    assert "timezoneOffset" not in certain + implied


def test_summaries() -> None:
    assert summarize([]) == NO_RESULTS_SUMMARY
    assert summarize([_entry("A")]) == "Parsed: A"
    assert summarize([_entry("A", "B")]) == "Parsed range: A to B"
    assert summarize([_entry("A"), _entry("B"), _entry("C")]) == "Parsed 3 date/time expressions"


def test_project_mode_first_and_all() -> None:
    candidates = [
        CandidateMatch(index=0, text="March 15", start=_components(15)),
        CandidateMatch(index=13, text="March 16", start=_components(16)),
    ]

    first = project(candidates, 0, "first")
    assert len(first.results) == 1
    assert first.results[0].matched_text == "March 15"
    assert first.summary == "Parsed: 2025-03-15T12:00:00.000+00:00"

    everything = project(candidates, 0, "all")
    assert [r.matched_text for r in everything.results] == ["March 15", "March 16"]
    assert everything.summary == "Parsed 2 date/time expressions"


def test_project_range_and_detected_offset() -> None:
    start = _components(15, hour=9)
    end = _components(15, hour=17)
    end.assign("timezoneOffset", -300)
    out = project([CandidateMatch(index=0, text="9-5", start=start, end=end)], 540, "first")
    r = out.results[0]
    assert r.is_range
    assert r.start.iso == "2025-03-15T18:00:00.000+09:00"
    assert r.start.detected_offset_minutes is None
    assert r.end is not None
    assert r.end.detected_offset_minutes == -300
    assert r.end.iso == "2025-03-16T07:00:00.000+09:00"
    assert "timezoneOffset" in r.end.certain_fields
    assert out.summary == f"Parsed range: {r.start.iso} to {r.end.iso}"


def test_project_empty() -> None:
    out = project([], 0, "all")
    assert out.results == ()
    assert out.summary == NO_RESULTS_SUMMARY


def _end_of_calendar(hour: int) -> ComponentSet:
    c = ComponentSet(reference_offset=0)
    for f, v in (("year", 9999), ("month", 12), ("day", 31), ("hour", hour)):
        c.assign(f, v)
    for f in ("minute", "second", "millisecond"):
        c.imply(f, 0)
    return c


def test_project_drops_instants_past_year_9999() -> None:
    # 23:00 at -05:00 is 04:00 UTC in year 10000.
    late = _end_of_calendar(23)
    late.assign("timezoneOffset", -300)
    candidates = [
        CandidateMatch(index=0, text="9999-12-31T23:00:00-05:00", start=late),
        CandidateMatch(index=30, text="March 15", start=_components(15)),
    ]
    out = project(candidates, 0, "first")
    assert [r.matched_text for r in out.results] == ["March 15"]

    only_late = project(candidates[:1], 0, "all")
    assert only_late.results == ()
    assert only_late.summary == NO_RESULTS_SUMMARY


def test_project_drops_renderings_past_year_9999() -> None:
    # Resolves inside the calendar, but +02:00 rendering does not.
    c = _end_of_calendar(23)
    out = project([CandidateMatch(index=0, text="Dec 31 9999 11pm", start=c)], 120, "all")
    assert out.results == ()
    assert project([CandidateMatch(index=0, text="Dec 31 9999 11pm", start=c)], 0, "all").results[0].start.iso == (
        "9999-12-31T23:00:00.000+00:00"
    )
