"""
Grammar capability: free text -> ordered candidate matches.

The pipeline only depends on the GrammarEngine protocol; EnglishGrammar adapts
dateparser (matching and relative resolution) and dateutil (explicit fields) to it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Protocol, runtime_checkable

from chrono_mcp.components import CandidateMatch
from chrono_mcp.grammar.parsers import SUPPLEMENTS, Context, ParsedSpan, dateparser_view, search_spans
from chrono_mcp.grammar.refiners import (
    adjust_forward,
    drop_unresolvable,
    merge_date_time,
    merge_ranges,
    remove_overlaps,
)
from chrono_mcp.policy import Policy
from chrono_mcp.preprocess import preprocess
from chrono_mcp.reference import local_wall_clock


@runtime_checkable
class GrammarEngine(Protocol):
    def find_matches(
        self,
        text: str,
        reference_instant: datetime,
        reference_offset_minutes: int,
        forward_only: bool,
    ) -> list[CandidateMatch]:
        """Matches in left-to-right order; no match is an empty list."""
        ...


class EnglishGrammar:
    """dateparser matches plus the supplemental parsers, then the refiners."""

    def __init__(self, policy: Optional[Policy] = None) -> None:
        self.policy = policy or Policy()

    def spans(self, text: str, ctx: Context) -> list[ParsedSpan]:
        claimed: list[ParsedSpan] = []
        for parser in SUPPLEMENTS:
            claimed.extend(parser(text, ctx))
        claimed = remove_overlaps(claimed)
        spans = remove_overlaps(claimed + search_spans(text, dateparser_view(text, claimed), ctx))
        spans = merge_date_time(spans, text)
        spans = merge_ranges(spans, text)
        return adjust_forward(drop_unresolvable(spans), ctx)

    def find_matches(
        self,
        text: str,
        reference_instant: datetime,
        reference_offset_minutes: int,
        forward_only: bool,
    ) -> list[CandidateMatch]:
        instant = reference_instant.astimezone(timezone.utc)
        ctx = Context(
            instant=instant,
            local=local_wall_clock(instant, reference_offset_minutes),
            offset=reference_offset_minutes,
            forward_only=forward_only,
            policy=self.policy,
        )
        normalized = preprocess(text)
        return [
            CandidateMatch(
                index=sp.index,
                text=text[sp.index : sp.end_index],
                start=sp.start,
                end=sp.end,
            )
            for sp in self.spans(normalized, ctx)
        ]
