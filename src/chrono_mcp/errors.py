from __future__ import annotations


class ChronoError(Exception):
    """Base class for failures surfaced to callers of parse_datetime."""


class InvalidInput(ChronoError, ValueError):
    """Tool arguments are missing or malformed (text, offset, mode...)."""


class InvalidReference(ChronoError, ValueError):
    """The reference timestamp does not denote an instant."""


class InternalError(ChronoError, RuntimeError):
    """Unexpected failure inside the grammar or while rendering."""
