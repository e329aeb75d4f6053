from __future__ import annotations

import re
from typing import Final

from dateutil import parser as du_parser


_FLAGS: Final[int] = re.IGNORECASE

# dateutil's English vocabulary; the supplemental parsers reuse it for weekday names.
PARSER_INFO: Final[du_parser.parserinfo] = du_parser.parserinfo()
WEEKDAY_ALT: Final[str] = "|".join(
    re.escape(name)
    for names in du_parser.parserinfo.WEEKDAYS
    for name in sorted(names, key=len, reverse=True)
)

# Vocabulary dateparser does not read the way the service needs it; these spans are
# parsed by the supplemental parsers and blanked out of dateparser's view.
RE_DAY_PART: Final[re.Pattern[str]] = re.compile(
    r"\b(?:(this|in\s+the)\s+)?(morning|afternoon|evening|noon|midday|midnight)\b",
    _FLAGS,
)
RE_TONIGHT: Final[re.Pattern[str]] = re.compile(r"\btonight\b", _FLAGS)
RE_RELATIVE_WORD: Final[re.Pattern[str]] = re.compile(
    rf"\b(this|next|last|past|coming|previous)\s+(week|month|year|{WEEKDAY_ALT})\b",
    _FLAGS,
)
# `9 o'clock` is shown to dateparser as `9:00`.
RE_OCLOCK: Final[re.Pattern[str]] = re.compile(r"(?<=\d)(\s*o'?clock)\b", _FLAGS)

# Field classification of relative fragments dateutil cannot read.
RE_CLOCK: Final[re.Pattern[str]] = re.compile(
    r"(?<![\w:])(\d{1,2})"
    r"(?:(:\d{2})(:\d{2})?(\.\d+)?(?:\s*[ap]\.?m\b\.?)?|\s*[ap]\.?m\b\.?)",
    _FLAGS,
)
RE_MERIDIEM: Final[re.Pattern[str]] = re.compile(r"\d\s*[ap]\.?m\b|(?<!\d)0\d:\d{2}", _FLAGS)
RE_NOW: Final[re.Pattern[str]] = re.compile(r"\bnow\b(?<!from now)", _FLAGS)
RE_DAY_ANCHOR: Final[re.Pattern[str]] = re.compile(r"\b(?:today|tomorrow|tmrw?|yesterday)\b", _FLAGS)
RE_DURATION: Final[re.Pattern[str]] = re.compile(
    r"\b(?:in|within|after)(?:\s+\S+){1,3}?\s+(second|minute|hour|day|week|month|year)s?\b"
    r"|\b(second|minute|hour|day|week|month|year)s?\s+(?:ago|before|earlier|later|after|from\s+now|hence)\b",
    _FLAGS,
)
SUB_DAY_UNITS: Final[frozenset[str]] = frozenset({"second", "minute", "hour"})

# Connector words dateparser sometimes keeps at the edge of a fragment.
RE_LEADING_CONNECTOR: Final[re.Pattern[str]] = re.compile(
    r"^(?:(?:on|at|from|to|until|till|between|and|the)\b\s*|[,\s]+)+",
    _FLAGS,
)

# Gap text between two matches.
RE_GAP_DATE_THEN_TIME: Final[re.Pattern[str]] = re.compile(r"^\s*(?:T|at|on|,|@)?\s*$", _FLAGS)
RE_GAP_TIME_THEN_DATE: Final[re.Pattern[str]] = re.compile(r"^\s*(?:on|of|,)?\s*$", _FLAGS)
RE_GAP_RANGE: Final[re.Pattern[str]] = re.compile(r"^\s*(?:to|until|till|through|thru|-|~)\s*$", _FLAGS)
RE_GAP_BETWEEN_AND: Final[re.Pattern[str]] = re.compile(r"^\s*and\s*$", _FLAGS)
RE_BETWEEN_BEFORE: Final[re.Pattern[str]] = re.compile(r"\bbetween\s+$", _FLAGS)
