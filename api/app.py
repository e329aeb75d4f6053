"""
HTTP service for the chrono_parse MCP tool.

POST /chrono: JSON-RPC 2.0 body (initialize, tools/list, tools/call).
Optional query parameter `timezone_offset` sets the default output offset for
calls that do not pass one.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from api.rpc import INTERNAL_ERROR, INVALID_REQUEST, error_response, handle_request
from api.schema import JSONRPCRequest


logger = logging.getLogger(__name__)

app = FastAPI(
    title="Chrono MCP",
    description="Natural-language date/time parsing exposed as a JSON-RPC tool.",
    version="0.1.0",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Loaded at startup, read-only afterwards.
_settings: Any = None


@app.on_event("startup")
def startup() -> None:
    from chrono_mcp.config import load_dotenv_into_env, load_settings

    load_dotenv_into_env()
    global _settings
    _settings = load_settings()
    logging.basicConfig(level=_settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _default_offset(request: Request) -> Optional[int]:
    raw = request.query_params.get("timezone_offset")
    if raw:
        try:
            return int(raw.strip())
        except ValueError:
            logger.warning("ignoring non-integer timezone_offset query parameter: %r", raw)
    if _settings is not None:
        return _settings.default_timezone_offset
    return None


def _request_id(body: Any) -> Optional[int | str]:
    rid = body.get("id") if isinstance(body, dict) else None
    return rid if isinstance(rid, (int, str)) and not isinstance(rid, bool) else None


def _reply(body: dict[str, Any]) -> JSONResponse:
    # JSON-RPC errors travel in the body; HTTP status stays 200.
    return JSONResponse(content=body, status_code=200)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# Any path starting with /chrono.
@app.post("/chrono{subpath:path}")
async def chrono(request: Request, subpath: str) -> JSONResponse:
    try:
        body = await request.json()
    except Exception as e:  # noqa: BLE001
        logger.warning("unreadable JSON-RPC body: %s", e)
        return _reply(error_response(None, INTERNAL_ERROR, str(e) or "Internal error").to_wire())

    if not isinstance(body, dict) or body.get("jsonrpc") != "2.0":
        return _reply(error_response(_request_id(body), INVALID_REQUEST, "Invalid Request").to_wire())

    try:
        rpc_request = JSONRPCRequest.model_validate(body)
    except ValidationError:
        return _reply(error_response(_request_id(body), INVALID_REQUEST, "Invalid Request").to_wire())

    response = handle_request(rpc_request, _default_offset(request))
    return _reply(response.to_wire())


if __name__ == "__main__":
    import uvicorn

    from chrono_mcp.config import load_settings

    s = load_settings()
    uvicorn.run("api.app:app", host=s.host, port=s.port)
