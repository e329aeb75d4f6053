from __future__ import annotations

import logging
from typing import Optional

from chrono_mcp.errors import ChronoError, InternalError, InvalidInput
from chrono_mcp.grammar.engine import EnglishGrammar, GrammarEngine
from chrono_mcp.projector import project
from chrono_mcp.reference import effective_offset, resolve_reference
from chrono_mcp.schema import ParseRequest, ParseResponse


logger = logging.getLogger(__name__)


def parse_datetime(request: ParseRequest, *, grammar: Optional[GrammarEngine] = None) -> ParseResponse:
    """
    End-to-end parsing of one request.

    Raises InvalidInput / InvalidReference for caller mistakes (before any grammar
    call) and InternalError for anything unexpected past that point.
    """
    if not isinstance(request.text, str) or not request.text:
        raise InvalidInput("text is required and must be a string")

    reference = resolve_reference(request.reference)
    offset = effective_offset(request.timezone_offset)
    engine = grammar if grammar is not None else EnglishGrammar()

    try:
        candidates = engine.find_matches(request.text, reference, offset, request.forward_only)
        response = project(candidates, offset, request.mode)
    except ChronoError:
        raise
    except Exception as e:
        logger.exception("chrono_parse failed for text=%r", request.text)
        raise InternalError(f"Failed to parse date/time: {e}") from e

    logger.debug("parsed %d result(s) from %r", len(response.results), request.text)
    return response
