from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Final, Literal, Mapping, Optional

from chrono_mcp.errors import InvalidInput, InvalidReference


Mode = Literal["first", "all"]

_MODES: Final[set[str]] = {"first", "all"}


# -----------------------------
# Request
# -----------------------------


@dataclass(frozen=True)
class ParseRequest:
    text: str
    reference: Optional[str] = None
    timezone_offset: Optional[int] = None
    forward_only: bool = True
    mode: Mode = "first"

    @classmethod
    def from_arguments(cls, args: Mapping[str, Any]) -> ParseRequest:
        """Validate raw `chrono_parse` tool arguments."""
        text = args.get("text")
        if not isinstance(text, str) or not text:
            raise InvalidInput("text is required and must be a string")

        reference = args.get("reference")
        if reference is not None and not isinstance(reference, str):
            raise InvalidReference(f"Invalid reference date: {reference!r}")

        offset = args.get("timezone_offset")
        if offset is not None:
            offset = _coerce_offset(offset)

        forward_only = args.get("forwardOnly")
        if forward_only is None:
            forward_only = True
        elif not isinstance(forward_only, bool):
            raise InvalidInput("forwardOnly must be a boolean")

        mode = args.get("mode")
        if mode is None:
            mode = "first"
        elif mode not in _MODES:
            raise InvalidInput(f"Invalid mode: {mode!r} (expected 'first' or 'all')")

        return cls(
            text=text,
            reference=reference,
            timezone_offset=offset,
            forward_only=forward_only,
            mode=mode,
        )


def _coerce_offset(value: Any) -> int:
    # bool is an int subclass; true/false are not offsets.
    if isinstance(value, bool):
        raise InvalidInput("Invalid timezone_offset: expected integer minutes")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise InvalidInput(f"Invalid timezone_offset: {value!r} (expected integer minutes)")


# -----------------------------
# Response
# -----------------------------


@dataclass(frozen=True)
class ParsedDateTime:
    iso: str
    unix_millis: int
    detected_offset_minutes: Optional[int]
    certain_fields: tuple[str, ...] = ()
    implied_fields: tuple[str, ...] = ()


@dataclass(frozen=True)
class ParseResultEntry:
    matched_text: str
    start: ParsedDateTime
    end: Optional[ParsedDateTime] = None

    @property
    def is_range(self) -> bool:
        return self.end is not None


@dataclass(frozen=True)
class ParseResponse:
    results: tuple[ParseResultEntry, ...] = field(default_factory=tuple)
    summary: str = ""


def _datetime_json(p: ParsedDateTime) -> dict[str, Any]:
    return {
        "iso": p.iso,
        "unix": p.unix_millis,
        "timezoneOffset": p.detected_offset_minutes,
        "certain": list(p.certain_fields),
        "implied": list(p.implied_fields),
    }


def to_json(response: ParseResponse) -> dict[str, Any]:
    """Wire shape of the `chrono_parse` tool result."""
    results: list[dict[str, Any]] = []
    for r in response.results:
        entry: dict[str, Any] = {
            "text": r.matched_text,
            "isRange": r.is_range,
            "start": _datetime_json(r.start),
        }
        if r.end is not None:
            entry["end"] = _datetime_json(r.end)
        results.append(entry)
    return {"results": results, "summary": response.summary}
