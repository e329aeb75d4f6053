from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from chrono_mcp.errors import InvalidReference


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def resolve_reference(raw: Optional[str], *, now: Callable[[], datetime] = _utc_now) -> datetime:
    """
    Resolve the caller's reference timestamp to an aware UTC instant.

    - absent or blank: current wall-clock time
    - ISO-8601 (`Z`, `+09:00`, date-only...): that instant; no offset means UTC
    """
    if raw is None:
        return now()
    if not isinstance(raw, str):
        raise InvalidReference(f"Invalid reference date: {raw!r}")
    s = raw.strip()
    if not s:
        return now()
    try:
        parsed = datetime.fromisoformat(s)
    except ValueError as e:
        raise InvalidReference(f"Invalid reference date: {raw}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def effective_offset(timezone_offset: Optional[int]) -> int:
    # Exotic offsets (570, -210, ...) are legal; only integer range applies.
    return 0 if timezone_offset is None else int(timezone_offset)


def local_wall_clock(instant: datetime, offset_minutes: int) -> datetime:
    """Naive wall clock of `instant` in a fixed offset (linear shift, no DST)."""
    shifted = instant.astimezone(timezone.utc) + timedelta(minutes=offset_minutes)
    return shifted.replace(tzinfo=None)
