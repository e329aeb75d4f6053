from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Final, Literal, Optional


# -----------------------------
# Field vocabulary
# -----------------------------

Field = Literal[
    "year",
    "month",
    "day",
    "hour",
    "minute",
    "second",
    "millisecond",
    "timezoneOffset",
]

FIELDS: Final[tuple[Field, ...]] = (
    "year",
    "month",
    "day",
    "hour",
    "minute",
    "second",
    "millisecond",
    "timezoneOffset",
)

DATE_FIELDS: Final[tuple[Field, ...]] = ("year", "month", "day")
TIME_FIELDS: Final[tuple[Field, ...]] = ("hour", "minute", "second", "millisecond")


@dataclass(frozen=True)
class Explicit:
    """Value stated in the source text."""

    value: int


@dataclass(frozen=True)
class Inferred:
    """Value filled in from the reference instant or a default."""

    value: int


FieldValue = Explicit | Inferred


class ComponentSet:
    """
    Per-field values of one side (start or end) of a match.

    A field is either absent, Inferred or Explicit; the mapping holds at most
    one state per field so certain/implied can never overlap.
    """

    def __init__(self, reference_offset: int, values: Optional[dict[Field, FieldValue]] = None) -> None:
        self.reference_offset = reference_offset
        self._values: dict[Field, FieldValue] = dict(values or {})

    def assign(self, field: Field, value: int) -> None:
        self._values[field] = Explicit(int(value))

    def imply(self, field: Field, value: int) -> None:
        # Never downgrade a field the text stated.
        if isinstance(self._values.get(field), Explicit):
            return
        self._values[field] = Inferred(int(value))

    def update(self, field: Field, value: int) -> None:
        """Replace the value of a present field, keeping its tag."""
        current = self._values[field]
        self._values[field] = type(current)(int(value))

    def adopt(self, field: Field, other: ComponentSet) -> None:
        """Take `other`'s state for `field` as-is (including absence)."""
        state = other.state(field)
        if state is None:
            self._values.pop(field, None)
        else:
            self._values[field] = state

    def has(self, field: Field) -> bool:
        return field in self._values

    def state(self, field: Field) -> Optional[FieldValue]:
        return self._values.get(field)

    def is_explicit(self, field: Field) -> bool:
        return isinstance(self._values.get(field), Explicit)

    def field_value(self, field: Field) -> Optional[int]:
        v = self._values.get(field)
        return None if v is None else v.value

    def copy(self) -> ComponentSet:
        return ComponentSet(self.reference_offset, self._values)

    def wall_clock(self) -> datetime:
        """Naive date-time built from the date and time fields."""
        missing = [f for f in DATE_FIELDS + TIME_FIELDS if f not in self._values]
        if missing:
            raise ValueError(f"Incomplete components, missing: {', '.join(missing)}")
        return datetime(
            self._values["year"].value,
            self._values["month"].value,
            self._values["day"].value,
            self._values["hour"].value,
            self._values["minute"].value,
            self._values["second"].value,
            self._values["millisecond"].value * 1000,
        )

    def resolved_instant(self) -> datetime:
        """Absolute UTC instant; the zone field wins over the reference offset."""
        offset = self.field_value("timezoneOffset")
        if offset is None:
            offset = self.reference_offset
        local = self.wall_clock()
        return (local - timedelta(minutes=offset)).replace(tzinfo=timezone.utc)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ComponentSet):
            return NotImplemented
        return self.reference_offset == other.reference_offset and self._values == other._values

    def __repr__(self) -> str:
        parts = []
        for f in FIELDS:
            v = self._values.get(f)
            if v is None:
                continue
            mark = "!" if isinstance(v, Explicit) else "?"
            parts.append(f"{f}={v.value}{mark}")
        return f"ComponentSet({', '.join(parts)})"


@dataclass(frozen=True)
class CandidateMatch:
    index: int
    text: str
    start: ComponentSet
    end: Optional[ComponentSet] = None

    @property
    def is_range(self) -> bool:
        return self.end is not None
