from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
import logging
import re
from typing import Any, Callable, Optional

from dateparser.search import search_dates
from dateutil.relativedelta import FR, MO, SA, SU, TH, TU, WE, relativedelta

from chrono_mcp.components import ComponentSet
from chrono_mcp.grammar.fields import classify
from chrono_mcp.grammar.patterns import (
    PARSER_INFO,
    RE_DAY_PART,
    RE_LEADING_CONNECTOR,
    RE_OCLOCK,
    RE_RELATIVE_WORD,
    RE_TONIGHT,
)
from chrono_mcp.policy import Policy


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Context:
    instant: datetime  # aware, UTC
    local: datetime  # naive wall clock of `instant` in `offset`
    offset: int
    forward_only: bool
    policy: Policy

    def components(self) -> ComponentSet:
        return ComponentSet(reference_offset=self.offset)


@dataclass
class ParsedSpan:
    """One raw match; offsets index the normalized (same-length) text."""

    index: int
    end_index: int
    start: ComponentSet
    end: Optional[ComponentSet] = None
    has_date: bool = False
    has_time: bool = False
    weekday_based: bool = False
    # Date part implies the evening ("tonight"); bare hours move to PM on merge.
    evening: bool = False
    # Time stated with am/pm or on a 24h clock.
    meridiem: bool = False


Parser = Callable[[str, Context], list[ParsedSpan]]

_WEEKDAYS = (MO, TU, WE, TH, FR, SA, SU)


def assign_date(c: ComponentSet, d: date) -> None:
    c.assign("year", d.year)
    c.assign("month", d.month)
    c.assign("day", d.day)


def imply_date(c: ComponentSet, d: date) -> None:
    c.imply("year", d.year)
    c.imply("month", d.month)
    c.imply("day", d.day)


def imply_time(c: ComponentSet, hour: int, minute: int = 0, second: int = 0, millisecond: int = 0) -> None:
    c.imply("hour", hour)
    c.imply("minute", minute)
    c.imply("second", second)
    c.imply("millisecond", millisecond)


def imply_time_from(c: ComponentSet, dt: datetime) -> None:
    imply_time(c, dt.hour, dt.minute, dt.second, dt.microsecond // 1000)


# -----------------------------
# dateparser
# -----------------------------


def dateparser_settings(ctx: Context) -> dict[str, Any]:
    # TIMEZONE and RETURN_AS_TIMEZONE_AWARE keep their defaults: a zone named in the
    # text stays on the result, and results without one come back naive wall clocks
    # in the reference offset.
    return {
        "RELATIVE_BASE": ctx.local,
        "PREFER_DATES_FROM": "future" if ctx.forward_only else "current_period",
        "PREFER_DAY_OF_MONTH": "first",
        "DATE_ORDER": "MDY",
    }


def dateparser_view(text: str, claimed: list[ParsedSpan]) -> str:
    """
    Text handed to dateparser, same length as `text`:
    - spans already claimed by the supplemental parsers are blanked
    - `9 o'clock` reads `9:00`
    """
    chars = list(text)
    for sp in claimed:
        chars[sp.index : sp.end_index] = " " * (sp.end_index - sp.index)
    view = "".join(chars)
    return RE_OCLOCK.sub(lambda m: ":00".ljust(len(m.group(1))), view)


def _locate(view: str, fragment: str, pos: int) -> Optional[re.Match[str]]:
    words = fragment.split()
    if not words:
        return None
    pattern = r"\s+".join(re.escape(w) for w in words)
    return re.compile(pattern, re.IGNORECASE).search(view, pos)


def _span_from(dt: datetime, fragment: str, index: int, end_index: int, ctx: Context) -> ParsedSpan:
    fields = classify(fragment)
    c = ctx.components()
    values = {
        "year": dt.year,
        "month": dt.month,
        "day": dt.day,
        "hour": dt.hour,
        "minute": dt.minute,
        "second": dt.second,
        "millisecond": dt.microsecond // 1000,
    }
    for f, v in values.items():
        if f in fields.explicit:
            c.assign(f, v)
        else:
            c.imply(f, v)
    if not fields.has_time and not fields.anchored:
        imply_time(c, ctx.policy.implied_hour)
    offset = dt.utcoffset()
    if offset is not None:
        c.assign("timezoneOffset", offset // timedelta(minutes=1))
    return ParsedSpan(
        index=index,
        end_index=end_index,
        start=c,
        has_date=fields.has_date,
        has_time=fields.has_time,
        weekday_based=fields.weekday_based,
        meridiem=fields.meridiem or (fields.has_time and dt.hour >= 12),
    )


def search_spans(text: str, view: str, ctx: Context) -> list[ParsedSpan]:
    """Matches dateparser finds in `view`, resolved against the reference wall clock."""
    if not view.strip():
        return []
    found = search_dates(view, languages=["en"], settings=dateparser_settings(ctx)) or []
    out: list[ParsedSpan] = []
    pos = 0
    for fragment, dt in found:
        m = _locate(view, fragment, pos)
        if m is None:
            logger.debug("dateparser fragment %r not located in text", fragment)
            continue
        pos = m.end()
        lead = RE_LEADING_CONNECTOR.match(m.group())
        index = m.start() + (lead.end() if lead else 0)
        end = m.end()
        if index >= end:
            continue
        fragment = view[index:end]
        if view.startswith(":00", end - 3):
            oclock = RE_OCLOCK.match(text, end - 3)
            if oclock:
                end = oclock.end()
        out.append(_span_from(dt, fragment, index, end, ctx))
    return out


# -----------------------------
# Supplemental parsers
# -----------------------------


def parse_day_part(text: str, ctx: Context) -> list[ParsedSpan]:
    """`noon`, `midnight`, `this morning`, `in the evening`."""
    policy = ctx.policy
    vague = {
        "morning": policy.morning_hour,
        "afternoon": policy.afternoon_hour,
        "evening": policy.evening_hour,
    }
    today = ctx.local.date()
    out: list[ParsedSpan] = []
    for m in RE_DAY_PART.finditer(text):
        word = m.group(2).lower()
        c = ctx.components()
        sp = ParsedSpan(index=m.start(), end_index=m.end(), start=c, has_time=True, meridiem=True)
        if (m.group(1) or "").lower() == "this":
            assign_date(c, today)
            sp.has_date = True
        else:
            imply_date(c, today)
        if word in ("noon", "midday"):
            c.assign("hour", 12)
        elif word == "midnight":
            c.assign("hour", 0)
        else:
            c.imply("hour", vague[word])
        c.imply("minute", 0)
        c.imply("second", 0)
        c.imply("millisecond", 0)
        out.append(sp)
    return out


def parse_tonight(text: str, ctx: Context) -> list[ParsedSpan]:
    out: list[ParsedSpan] = []
    for m in RE_TONIGHT.finditer(text):
        c = ctx.components()
        assign_date(c, ctx.local.date())
        imply_time(c, ctx.policy.tonight_hour)
        out.append(ParsedSpan(index=m.start(), end_index=m.end(), start=c, has_date=True, evening=True))
    return out


_SHIFT = {"this": 0, "next": 1, "coming": 1, "last": -1, "past": -1, "previous": -1}


def _week_start(today: date, policy: Policy) -> date:
    back = today.weekday() if policy.week_start == "monday" else (today.weekday() + 1) % 7
    return today - relativedelta(days=back)


def _relative_word_span(m: re.Match[str], ctx: Context) -> ParsedSpan:
    modifier = m.group(1).lower()
    unit = m.group(2).lower()
    shift = _SHIFT[modifier]
    today = ctx.local.date()
    c = ctx.components()
    sp = ParsedSpan(index=m.start(), end_index=m.end(), start=c, has_date=True)

    weekday = PARSER_INFO.weekday(unit)
    if weekday is not None:
        if modifier == "coming":
            target = today + relativedelta(days=1, weekday=_WEEKDAYS[weekday])
        else:
            target = _week_start(today, ctx.policy) + relativedelta(weeks=shift, weekday=_WEEKDAYS[weekday])
        imply_date(c, target)
        imply_time(c, ctx.policy.implied_hour)
        sp.weekday_based = True
        return sp

    if unit == "week":
        imply_date(c, today + relativedelta(weeks=shift))
    elif unit == "month":
        target = today + relativedelta(months=shift)
        c.assign("year", target.year)
        c.assign("month", target.month)
        c.imply("day", target.day)
    else:
        target = today + relativedelta(years=shift)
        c.assign("year", target.year)
        c.imply("month", target.month)
        c.imply("day", target.day)
    imply_time_from(c, ctx.local)
    return sp


def parse_relative_word(text: str, ctx: Context) -> list[ParsedSpan]:
    """`next week`, `last month`, `this year`, `next Friday`, `last Tue`."""
    out: list[ParsedSpan] = []
    for m in RE_RELATIVE_WORD.finditer(text):
        try:
            out.append(_relative_word_span(m, ctx))
        except (OverflowError, ValueError):
            # Outside the representable calendar.
            continue
    return out


SUPPLEMENTS: tuple[Parser, ...] = (
    parse_day_part,
    parse_tonight,
    parse_relative_word,
)
