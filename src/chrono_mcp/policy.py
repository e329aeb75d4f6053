from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class Policy:
    # Hour filled in for date-only expressions ("March 15", "Friday").
    implied_hour: int = 12
    # Vague parts of the day.
    morning_hour: int = 9
    afternoon_hour: int = 15
    evening_hour: int = 18
    tonight_hour: int = 22
    # Week boundary for "this/next/last <weekday>".
    week_start: Literal["monday", "sunday"] = "monday"
