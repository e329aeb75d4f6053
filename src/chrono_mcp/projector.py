from __future__ import annotations

from datetime import datetime, timedelta, timezone
from itertools import islice
import logging
from typing import Final, Iterator, Sequence

from chrono_mcp.components import FIELDS, CandidateMatch, ComponentSet
from chrono_mcp.schema import Mode, ParsedDateTime, ParseResponse, ParseResultEntry


logger = logging.getLogger(__name__)

NO_RESULTS_SUMMARY: Final[str] = "No date/time expressions found"

_EPOCH: Final[datetime] = datetime(1970, 1, 1, tzinfo=timezone.utc)


def partition_fields(components: ComponentSet) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """(certain, implied) in vocabulary order; absent fields appear in neither."""
    certain: list[str] = []
    implied: list[str] = []
    for f in FIELDS:
        if components.is_explicit(f):
            certain.append(f)
        elif components.has(f):
            implied.append(f)
    return tuple(certain), tuple(implied)


def format_offset(offset_minutes: int) -> str:
    sign = "+" if offset_minutes >= 0 else "-"
    hours, minutes = divmod(abs(offset_minutes), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def render_iso(instant: datetime, offset_minutes: int) -> str:
    """
    Render an absolute instant in a fixed offset.

    Linear shift then UTC field read-out: no DST, no zone rules. Milliseconds are
    always shown and the suffix is always numeric (`+00:00`, never `Z`).
    """
    t = instant.astimezone(timezone.utc) + timedelta(minutes=offset_minutes)
    return (
        f"{t.year:04d}-{t.month:02d}-{t.day:02d}"
        f"T{t.hour:02d}:{t.minute:02d}:{t.second:02d}.{t.microsecond // 1000:03d}"
        f"{format_offset(offset_minutes)}"
    )


def unix_millis(instant: datetime) -> int:
    return (instant.astimezone(timezone.utc) - _EPOCH) // timedelta(milliseconds=1)


def project_components(components: ComponentSet, offset_minutes: int) -> ParsedDateTime:
    instant = components.resolved_instant()
    certain, implied = partition_fields(components)
    return ParsedDateTime(
        iso=render_iso(instant, offset_minutes),
        unix_millis=unix_millis(instant),
        detected_offset_minutes=components.field_value("timezoneOffset"),
        certain_fields=certain,
        implied_fields=implied,
    )


def project_match(match: CandidateMatch, offset_minutes: int) -> ParseResultEntry:
    return ParseResultEntry(
        matched_text=match.text,
        start=project_components(match.start, offset_minutes),
        end=project_components(match.end, offset_minutes) if match.end is not None else None,
    )


def summarize(results: Sequence[ParseResultEntry]) -> str:
    if not results:
        return NO_RESULTS_SUMMARY
    if len(results) == 1:
        r = results[0]
        if r.end is not None:
            return f"Parsed range: {r.start.iso} to {r.end.iso}"
        return f"Parsed: {r.start.iso}"
    return f"Parsed {len(results)} date/time expressions"


def _projected(candidates: Sequence[CandidateMatch], offset_minutes: int) -> Iterator[ParseResultEntry]:
    for c in candidates:
        try:
            yield project_match(c, offset_minutes)
        except OverflowError:
            # Rendered outside years 1..9999.
            logger.debug("Dropping match %r: out of datetime range", c.text)


def project(candidates: Sequence[CandidateMatch], offset_minutes: int, mode: Mode) -> ParseResponse:
    entries = _projected(candidates, offset_minutes)
    # "first" renders candidates only until one projects.
    results = tuple(islice(entries, 1)) if mode == "first" else tuple(entries)
    if not results:
        return ParseResponse(results=(), summary=NO_RESULTS_SUMMARY)
    return ParseResponse(results=results, summary=summarize(results))
