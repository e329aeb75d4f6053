from __future__ import annotations

from typing import Optional

from dateutil.relativedelta import relativedelta

from chrono_mcp.components import DATE_FIELDS, TIME_FIELDS, ComponentSet
from chrono_mcp.grammar.parsers import Context, ParsedSpan
from chrono_mcp.grammar.patterns import (
    RE_BETWEEN_BEFORE,
    RE_GAP_BETWEEN_AND,
    RE_GAP_DATE_THEN_TIME,
    RE_GAP_RANGE,
    RE_GAP_TIME_THEN_DATE,
)


def _length(sp: ParsedSpan) -> int:
    return sp.end_index - sp.index


def _date_only(sp: ParsedSpan) -> bool:
    return sp.has_date and not sp.has_time


def _time_only(sp: ParsedSpan) -> bool:
    return sp.has_time and not sp.has_date


def shift_date(c: ComponentSet, delta: relativedelta) -> bool:
    """Move the date fields, keeping each field's tag; False when out of range."""
    try:
        d = c.wall_clock().date() + delta
    except (OverflowError, ValueError):
        return False
    c.update("year", d.year)
    c.update("month", d.month)
    c.update("day", d.day)
    return True


def remove_overlaps(spans: list[ParsedSpan]) -> list[ParsedSpan]:
    """Keep the longest of overlapping matches; earlier wins ties."""
    ordered = sorted(spans, key=lambda s: (s.index, -_length(s)))
    out: list[ParsedSpan] = []
    for sp in ordered:
        if out and sp.index < out[-1].end_index:
            if _length(sp) > _length(out[-1]):
                out[-1] = sp
            continue
        out.append(sp)
    return out


def _combine(date_c: ComponentSet, time_c: ComponentSet, *, to_evening: bool) -> ComponentSet:
    c = date_c.copy()
    for f in TIME_FIELDS:
        c.adopt(f, time_c)
    if time_c.has("timezoneOffset"):
        c.adopt("timezoneOffset", time_c)
    hour = c.field_value("hour")
    if to_evening and hour is not None and hour < 12:
        c.update("hour", hour + 12)
    return c


def _merge_date_time(date_sp: ParsedSpan, time_sp: ParsedSpan) -> ParsedSpan:
    to_evening = date_sp.evening and not time_sp.meridiem
    start = _combine(date_sp.start, time_sp.start, to_evening=to_evening)
    end: Optional[ComponentSet] = None
    if date_sp.end is not None or time_sp.end is not None:
        end = _combine(
            date_sp.end or date_sp.start,
            time_sp.end or time_sp.start,
            to_evening=to_evening,
        )
    return ParsedSpan(
        index=min(date_sp.index, time_sp.index),
        end_index=max(date_sp.end_index, time_sp.end_index),
        start=start,
        end=end,
        has_date=True,
        has_time=True,
        weekday_based=date_sp.weekday_based,
        meridiem=time_sp.meridiem,
    )


def merge_date_time(spans: list[ParsedSpan], text: str) -> list[ParsedSpan]:
    """`tomorrow at 5pm`, `Friday 3pm`, `5pm on Friday`."""
    out: list[ParsedSpan] = []
    i = 0
    while i < len(spans):
        cur = spans[i]
        if i + 1 < len(spans):
            nxt = spans[i + 1]
            gap = text[cur.end_index : nxt.index]
            if _date_only(cur) and _time_only(nxt) and RE_GAP_DATE_THEN_TIME.match(gap):
                out.append(_merge_date_time(cur, nxt))
                i += 2
                continue
            if _time_only(cur) and _date_only(nxt) and RE_GAP_TIME_THEN_DATE.match(gap):
                out.append(_merge_date_time(nxt, cur))
                i += 2
                continue
        out.append(cur)
        i += 1
    return out


def _same_day_next_year(c: ComponentSet) -> bool:
    if c.field_value("month") == 2 and c.field_value("day") == 29:
        return False
    return shift_date(c, relativedelta(years=1))


def _make_range(a: ParsedSpan, b: ParsedSpan) -> ParsedSpan:
    start = a.start.copy()
    end = b.start.copy()

    # Borrow the calendar date from the side that stated one.
    if a.has_date and not b.has_date:
        for f in DATE_FIELDS:
            end.imply(f, start.field_value(f))
    elif b.has_date and not a.has_date:
        for f in DATE_FIELDS:
            start.imply(f, end.field_value(f))
    if start.has("timezoneOffset") and not end.has("timezoneOffset"):
        end.imply("timezoneOffset", start.field_value("timezoneOffset"))
    elif end.has("timezoneOffset") and not start.has("timezoneOffset"):
        start.imply("timezoneOffset", end.field_value("timezoneOffset"))

    if end.resolved_instant() < start.resolved_instant():
        if b.weekday_based:
            shift_date(end, relativedelta(weeks=1))
        elif not b.has_date:
            shift_date(end, relativedelta(days=1))
        elif end.is_explicit("year") or not _same_day_next_year(end):
            start, end = end, start

    return ParsedSpan(
        index=a.index,
        end_index=b.end_index,
        start=start,
        end=end,
        has_date=a.has_date or b.has_date,
        has_time=a.has_time or b.has_time,
        weekday_based=a.weekday_based,
        meridiem=a.meridiem and b.meridiem,
    )


def merge_ranges(spans: list[ParsedSpan], text: str) -> list[ParsedSpan]:
    """`Monday to Friday`, `9am to 5pm`, `between May 1 and May 3`."""
    out: list[ParsedSpan] = []
    i = 0
    while i < len(spans):
        cur = spans[i]
        if i + 1 < len(spans) and cur.end is None and spans[i + 1].end is None:
            nxt = spans[i + 1]
            gap = text[cur.end_index : nxt.index]
            between = RE_GAP_BETWEEN_AND.match(gap) and RE_BETWEEN_BEFORE.search(text[: cur.index])
            if RE_GAP_RANGE.match(gap) or between:
                try:
                    merged = _make_range(cur, nxt)
                except OverflowError:
                    merged = None
                if merged is not None:
                    out.append(merged)
                    i += 2
                    continue
        out.append(cur)
        i += 1
    return out


def adjust_forward(spans: list[ParsedSpan], ctx: Context) -> list[ParsedSpan]:
    """A time of day already past today moves to tomorrow."""
    if not ctx.forward_only:
        return spans
    for sp in spans:
        if not _time_only(sp):
            continue
        if sp.start.resolved_instant() < ctx.instant:
            shift_date(sp.start, relativedelta(days=1))
            if sp.end is not None:
                shift_date(sp.end, relativedelta(days=1))
    return spans


def drop_unresolvable(spans: list[ParsedSpan]) -> list[ParsedSpan]:
    """Matches whose instant falls outside the datetime range (years 1..9999) are dropped."""
    out: list[ParsedSpan] = []
    for sp in spans:
        try:
            sp.start.resolved_instant()
            if sp.end is not None:
                sp.end.resolved_instant()
        except OverflowError:
            continue
        out.append(sp)
    return out
