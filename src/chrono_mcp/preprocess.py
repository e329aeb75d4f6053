from __future__ import annotations

from typing import Final


# U+FF01..U+FF5E sit 0xFEE0 above their ASCII forms.
_FULLWIDTH_FIRST: Final[int] = 0xFF01
_FULLWIDTH_LAST: Final[int] = 0xFF5E
_FULLWIDTH_SHIFT: Final[int] = 0xFEE0

# Tilde, hyphens, figure/en/em dashes, minus sign, full-width tilde and hyphen.
_DASHES: Final[str] = "~\u2010\u2011\u2012\u2013\u2014\u2212\uff5e\uff0d"
# No-break, thin, narrow no-break and ideographic spaces, tab.
_SPACES: Final[str] = "\u00a0\u2009\u202f\u3000\t"


def _build_table() -> dict[int, str]:
    table = {o: chr(o - _FULLWIDTH_SHIFT) for o in range(_FULLWIDTH_FIRST, _FULLWIDTH_LAST + 1)}
    # Later entries win: a full-width tilde becomes "-", not "~".
    table.update({ord(ch): "-" for ch in _DASHES})
    table.update({ord(ch): " " for ch in _SPACES})
    return table


_TABLE: Final[dict[int, str]] = _build_table()


def normalize_unicode(text: str) -> str:
    """One character in, one character out."""
    return text.translate(_TABLE)


def preprocess(text: str) -> str:
    """
    Normalize text for the grammar patterns.

    Match offsets found on the result are used to slice the raw text, so the
    length must not change.
    """
    t = normalize_unicode(text)
    if len(t) != len(text):
        raise ValueError("preprocess changed length; offsets would break")
    return t
