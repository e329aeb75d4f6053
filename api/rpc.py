"""
JSON-RPC method dispatch for the `chrono_parse` tool.

Pure functions: no module state; the default offset arrives per call.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Final, Mapping, Optional

from api.schema import JSONRPCError, JSONRPCRequest, JSONRPCResponse, ToolCallResult, ToolContent
from chrono_mcp.errors import InternalError, InvalidInput, InvalidReference
from chrono_mcp.grammar.engine import GrammarEngine
from chrono_mcp.pipeline import parse_datetime
from chrono_mcp.projector import format_offset
from chrono_mcp.schema import ParseRequest, to_json


logger = logging.getLogger(__name__)

PROTOCOL_VERSION: Final[str] = "2024-11-05"
SERVER_NAME: Final[str] = "chrono-mcp"
SERVER_VERSION: Final[str] = "0.1.0"
TOOL_NAME: Final[str] = "chrono_parse"

INVALID_REQUEST: Final[int] = -32600
METHOD_NOT_FOUND: Final[int] = -32601
INVALID_PARAMS: Final[int] = -32602
INTERNAL_ERROR: Final[int] = -32603

_TOOL_DESCRIPTION: Final[str] = """Parse natural language date/time expressions into structured ISO/Unix timestamps.

Supports:
- Relative dates ("tomorrow", "next Friday", "in 3 days")
- Absolute dates ("March 15, 2024", "2024-03-15")
- Time expressions ("at 3pm", "15:30")
- Date ranges ("Monday to Friday", "Jan 1 to Jan 15")

Returns certain (explicit) vs implied (filled-in) components to handle ambiguity."""


def merge_defaults(args: Mapping[str, Any], defaults: Mapping[str, Any]) -> dict[str, Any]:
    """Apply each default only where the argument is absent; inputs are not mutated."""
    merged = dict(args)
    for k, v in defaults.items():
        if v is not None and merged.get(k) is None:
            merged[k] = v
    return merged


def tool_definition(default_offset: Optional[int] = None) -> dict[str, Any]:
    description = _TOOL_DESCRIPTION
    offset_desc = "Timezone offset in minutes from UTC (e.g., 540 for JST/+09:00, -300 for EST/-05:00)."
    if default_offset is not None:
        offset_desc += f" Defaults to {default_offset} (from query parameter)"
        description += (
            f"\n\nDefault timezone: {format_offset(default_offset)} ({default_offset} minutes from UTC)"
        )
    else:
        offset_desc += " Defaults to 0 (UTC)"

    return {
        "name": TOOL_NAME,
        "description": description,
        "inputSchema": {
            "type": "object",
            "properties": {
                "text": {
                    "type": "string",
                    "description": "Text containing date/time expressions to parse",
                },
                "reference": {
                    "type": "string",
                    "description": "Reference date/time as ISO 8601 string (e.g., '2025-10-05T10:00:00Z'). "
                    "Defaults to current time",
                },
                "timezone_offset": {
                    "type": "number",
                    "description": offset_desc,
                },
                "forwardOnly": {
                    "type": "boolean",
                    "description": "Prefer future dates when ambiguous. Defaults to true",
                },
                "mode": {
                    "type": "string",
                    "enum": ["first", "all"],
                    "description": "Parse mode: 'first' for first match only, 'all' for all matches. "
                    "Defaults to 'first'",
                },
            },
            "required": ["text"],
        },
    }


def error_response(request_id: Optional[int | str], code: int, message: str) -> JSONRPCResponse:
    return JSONRPCResponse(id=request_id, error=JSONRPCError(code=code, message=message))


def _call_tool(
    req: JSONRPCRequest,
    default_offset: Optional[int],
    grammar: Optional[GrammarEngine],
) -> JSONRPCResponse:
    params = req.params or {}
    if params.get("name") != TOOL_NAME:
        return error_response(req.id, INVALID_PARAMS, "Unknown tool")

    raw_args = params.get("arguments") or {}
    if not isinstance(raw_args, dict):
        return error_response(req.id, INVALID_PARAMS, "arguments must be an object")
    args = merge_defaults(raw_args, {"timezone_offset": default_offset})

    try:
        response = parse_datetime(ParseRequest.from_arguments(args), grammar=grammar)
    except (InvalidInput, InvalidReference) as e:
        return error_response(req.id, INVALID_PARAMS, str(e))
    except InternalError as e:
        # Already logged with traceback by the pipeline.
        return error_response(req.id, INTERNAL_ERROR, str(e))
    except Exception as e:
        logger.exception("tools/call failed")
        return error_response(req.id, INTERNAL_ERROR, str(e) or "Internal error")

    result = ToolCallResult(
        content=[ToolContent(text=json.dumps(to_json(response), ensure_ascii=False, indent=2))]
    )
    return JSONRPCResponse(id=req.id, result=result.model_dump())


def handle_request(
    req: JSONRPCRequest,
    default_offset: Optional[int] = None,
    *,
    grammar: Optional[GrammarEngine] = None,
) -> JSONRPCResponse:
    logger.debug("jsonrpc method=%s id=%r", req.method, req.id)

    if req.method == "initialize":
        return JSONRPCResponse(
            id=req.id,
            result={
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {}},
                "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
            },
        )

    if req.method == "tools/list":
        return JSONRPCResponse(id=req.id, result={"tools": [tool_definition(default_offset)]})

    if req.method == "tools/call":
        return _call_tool(req, default_offset, grammar)

    if req.method == "notifications/initialized":
        # Acknowledgement only.
        return JSONRPCResponse(result={})

    return error_response(req.id, METHOD_NOT_FOUND, "Method not found")
