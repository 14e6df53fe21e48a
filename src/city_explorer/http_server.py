"""HTTP transport: a JSON-RPC style ``/mcp`` endpoint plus REST conveniences."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import uvicorn
from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from city_explorer.errors import CityExplorerError, UnknownMethodError, ValidationError
from city_explorer.helpers import get_port
from city_explorer.tools import TOOL_DEFINITIONS, ToolDispatcher, ToolName

logger = logging.getLogger(__name__)

SERVER_NAME = "city-explorer"
SERVER_VERSION = "1.0.0"
PROTOCOL_VERSION = "2024-11-05"
INTERNAL_ERROR = -32603


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        logger.info("%s %s", request.method, request.url.path)
        return await call_next(request)


def _text_result(text: str) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": text}]}


def _log_failure(where: str, error: Exception) -> None:
    if isinstance(error, CityExplorerError):
        logger.warning("%s failed: %s", where, error)
    else:
        logger.exception("%s failed unexpectedly", where)


async def _call_tool(request: Request, name: Any, arguments: Optional[Dict[str, Any]]) -> str:
    dispatcher: ToolDispatcher = request.app.state.dispatcher
    return await run_in_threadpool(dispatcher.call_tool, name, arguments)


# =====================================================================
# ROUTES
# =====================================================================

async def health_check(request):
    """Health check endpoint for monitoring and load balancers."""
    return JSONResponse({"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()})


async def mcp_endpoint(request):
    """Emulates the MCP methods a JSON-RPC client needs over plain POST."""
    rpc_id: Any = 1
    try:
        body = await request.json()
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")
        rpc_id = body.get("id", 1)
        method = body.get("method")
        params = body.get("params") or {}
        logger.info("MCP %s", method)

        if method == "initialize":
            result = {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {}},
                "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
            }
        elif method == "notifications/initialized":
            return JSONResponse({"jsonrpc": "2.0", "id": rpc_id})
        elif method == "tools/list":
            result = {"tools": TOOL_DEFINITIONS}
        elif method == "tools/call":
            text = await _call_tool(request, params.get("name"), params.get("arguments"))
            result = _text_result(text)
        else:
            raise UnknownMethodError(f"Unknown method: {method}")
    except Exception as e:
        _log_failure("MCP request", e)
        return JSONResponse(
            {
                "jsonrpc": "2.0",
                "id": rpc_id if rpc_id is not None else 1,
                "error": {"code": INTERNAL_ERROR, "message": str(e)},
            },
            status_code=500,
        )

    return JSONResponse({"jsonrpc": "2.0", "id": rpc_id, "result": result})


async def _rest_tool(request: Request, tool: ToolName, arguments: Dict[str, Any]) -> JSONResponse:
    try:
        text = await _call_tool(request, tool.value, arguments)
    except Exception as e:
        _log_failure(f"GET {request.url.path}", e)
        return JSONResponse({"error": str(e)}, status_code=500)
    return JSONResponse(_text_result(text))


async def api_search(request):
    query = request.query_params
    return await _rest_tool(
        request,
        ToolName.SEARCH_PLACES,
        {
            "near": query.get("near", "Antalya"),
            "query": query.get("query", "restaurant"),
            "limit": query.get("limit", "10"),
        },
    )


async def api_place(request):
    return await _rest_tool(request, ToolName.GET_PLACE_DETAILS, {"fsq_place_id": request.path_params["place_id"]})


async def api_activities(request):
    query = request.query_params
    return await _rest_tool(
        request,
        ToolName.SEARCH_ACTIVITIES,
        {
            "city": query.get("city", "Istanbul"),
            "type": query.get("type", "museum"),
            "limit": query.get("limit", "10"),
        },
    )


# =====================================================================
# APPLICATION
# =====================================================================

def create_app(dispatcher: Optional[ToolDispatcher] = None) -> Starlette:
    """Build the Starlette application (compact place cards by default)."""
    app = Starlette(
        routes=[
            Route("/health", endpoint=health_check, methods=["GET"]),
            Route("/mcp", endpoint=mcp_endpoint, methods=["POST"]),
            Route("/api/search", endpoint=api_search, methods=["GET"]),
            Route("/api/places/{place_id}", endpoint=api_place, methods=["GET"]),
            Route("/api/activities", endpoint=api_activities, methods=["GET"]),
        ],
        middleware=[
            Middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"]),
            Middleware(RequestLoggingMiddleware),
        ],
    )
    app.state.dispatcher = dispatcher or ToolDispatcher(detailed_place_view=False)
    return app


def run(host: str = "0.0.0.0", port: Optional[int] = None) -> None:
    port = port or get_port()
    logger.info("City Explorer HTTP server on http://%s:%d", host, port)
    logger.info("Health check: /health, MCP endpoint: /mcp")
    logger.info("Available tools: %s", ", ".join(tool.value for tool in ToolName))
    uvicorn.run(create_app(), host=host, port=port)
