"""
Explicit/implied split for fragments matched by dateparser.

dateparser returns a complete datetime, so the fields the text actually states
are recovered separately: dateutil parses the fragment twice against two defaults
that differ in every field, and a field that comes out the same both times was
read from the text. Relative fragments (`tomorrow at 5pm`, `in 3 days`) are not
dateutil input; they are classified by their anchor words instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import re
from typing import Final

from dateutil import parser as du_parser

from chrono_mcp.components import DATE_FIELDS, TIME_FIELDS, Field
from chrono_mcp.grammar.patterns import (
    PARSER_INFO,
    RE_CLOCK,
    RE_DAY_ANCHOR,
    RE_DURATION,
    RE_MERIDIEM,
    RE_NOW,
    SUB_DAY_UNITS,
)


_DEFAULTS: Final[tuple[datetime, datetime]] = (
    datetime(2000, 1, 1),
    datetime(2004, 2, 3, 1, 1, 1, 1000),
)

_WORD = re.compile(r"[A-Za-z]+")


@dataclass(frozen=True)
class FragmentFields:
    explicit: frozenset[Field]
    # Resolved against "now" (`today`, `in 3 days`): the reference time of day is kept.
    anchored: bool = False
    weekday_based: bool = False
    meridiem: bool = False

    @property
    def has_time(self) -> bool:
        return any(f in self.explicit for f in TIME_FIELDS)

    @property
    def has_date(self) -> bool:
        return self.weekday_based or any(f in self.explicit for f in DATE_FIELDS) or not self.has_time


def _values(dt: datetime) -> dict[Field, int]:
    return {
        "year": dt.year,
        "month": dt.month,
        "day": dt.day,
        "hour": dt.hour,
        "minute": dt.minute,
        "second": dt.second,
        "millisecond": dt.microsecond // 1000,
    }


def _dateutil_fields(fragment: str) -> frozenset[Field] | None:
    parsed: list[dict[Field, int]] = []
    for default in _DEFAULTS:
        try:
            parsed.append(_values(du_parser.parse(fragment, default=default, ignoretz=True)))
        except (du_parser.ParserError, ValueError, OverflowError):
            return None
    a, b = parsed
    return frozenset(f for f in a if a[f] == b[f])


def _relative_fields(fragment: str) -> tuple[frozenset[Field], bool]:
    explicit: set[Field] = set()
    clock = RE_CLOCK.search(fragment)
    if clock:
        explicit.add("hour")
        if clock.group(2):
            explicit.add("minute")
        if clock.group(3):
            explicit.add("second")
        if clock.group(4):
            explicit.add("millisecond")

    if RE_NOW.search(fragment):
        return frozenset(DATE_FIELDS + TIME_FIELDS), True
    if RE_DAY_ANCHOR.search(fragment):
        explicit.update(DATE_FIELDS)
        return frozenset(explicit), True
    duration = RE_DURATION.search(fragment)
    if duration:
        explicit.update(DATE_FIELDS)
        if (duration.group(1) or duration.group(2)).lower() in SUB_DAY_UNITS:
            explicit.update(("hour", "minute", "second"))
        return frozenset(explicit), True
    return frozenset(explicit), False


def classify(fragment: str) -> FragmentFields:
    explicit = _dateutil_fields(fragment)
    anchored = False
    if explicit is None:
        explicit, anchored = _relative_fields(fragment)
    # A weekday without a day of month moves the date; none of its date fields is stated.
    weekday_based = "day" not in explicit and any(
        PARSER_INFO.weekday(w) is not None for w in _WORD.findall(fragment)
    )
    if weekday_based:
        explicit = explicit - frozenset(DATE_FIELDS)
    return FragmentFields(
        explicit=explicit,
        anchored=anchored,
        weekday_based=weekday_based,
        meridiem=bool(RE_MERIDIEM.search(fragment)),
    )
