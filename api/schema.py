"""
JSON-RPC 2.0 envelope for the chrono MCP endpoint.

Tool arguments stay a plain dict here; chrono_mcp.schema.ParseRequest validates them
so that bad arguments surface as invalid-params instead of invalid-request.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


class JSONRPCRequest(BaseModel):
    """Inbound call or notification."""

    jsonrpc: Literal["2.0"] = Field(..., description="Protocol version, must be '2.0'")
    id: Optional[int | str] = Field(None, description="Request id; absent for notifications")
    method: str = Field(..., min_length=1, description="e.g. initialize, tools/list, tools/call")
    params: Optional[dict[str, Any]] = Field(None, description="Method parameters")


class JSONRPCError(BaseModel):
    code: int = Field(..., description="-32600 invalid request, -32601 unknown method, -32602 invalid params, -32603 internal")
    message: str
    data: Optional[Any] = None


class JSONRPCResponse(BaseModel):
    jsonrpc: Literal["2.0"] = "2.0"
    id: Optional[int | str] = None
    result: Optional[Any] = None
    error: Optional[JSONRPCError] = None

    def to_wire(self) -> dict[str, Any]:
        # `result` and `error` are mutually exclusive on the wire.
        return self.model_dump(exclude_none=True)


class ToolContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolCallResult(BaseModel):
    content: list[ToolContent] = Field(default_factory=list)
