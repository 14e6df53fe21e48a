import json
import logging
from typing import Annotated, Any, Dict, Optional
from dataclasses import dataclass
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from dotenv import load_dotenv
from fastmcp import FastMCP, Context
from pydantic import Field

from city_explorer.errors import CityExplorerError
from city_explorer.helpers import configure_logging, get_port
from city_explorer.tools import ToolDispatcher, ToolName

load_dotenv()

logger = logging.getLogger(__name__)

LimitParam = Annotated[
    int,
    Field(description="Number of results to return (1-50)", json_schema_extra={"minimum": 1, "maximum": 50}),
]

# =====================================================================
# APPLICATION CONTEXT AND LIFECYCLE
# =====================================================================

@dataclass
class AppContext:
    dispatcher: ToolDispatcher


def build_dispatcher() -> ToolDispatcher:
    """Create the dispatcher used by the stdio server (full place cards)."""
    return ToolDispatcher(detailed_place_view=True)


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[AppContext]:
    """Create the upstream clients once per server run."""
    yield AppContext(dispatcher=build_dispatcher())


mcp = FastMCP("City Explorer", lifespan=app_lifespan)


def get_dispatcher(ctx: Context) -> ToolDispatcher:
    return ctx.request_context.lifespan_context.dispatcher


async def _call_tool(ctx: Context, tool: ToolName, arguments: Dict[str, Any]) -> str:
    """Run a tool and render failures as text instead of protocol errors."""
    dispatcher = get_dispatcher(ctx)
    await ctx.info(f"{tool.value}: {json.dumps(arguments, ensure_ascii=False)}")
    try:
        return dispatcher.call_tool(tool.value, arguments)
    except CityExplorerError as e:
        logger.warning("%s failed: %s", tool.value, e)
        return f"Error: {str(e)}"
    except Exception as e:
        logger.exception("%s failed unexpectedly", tool.value)
        return f"Error: {str(e)}"

# =====================================================================
# FOURSQUARE PLACES TOOLS
# =====================================================================

@mcp.tool()
async def search_places(
    ctx: Context,
    near: Annotated[str, Field(description='Location to search near (e.g., "Antalya", "Istanbul")')] = "Antalya",
    query: Annotated[str, Field(description='Search query for places (e.g., "restaurant", "cafe", "bazaar")')] = "restaurant",
    limit: LimitParam = 10,
    categories: Annotated[str, Field(description="Category IDs to filter by (comma-separated)")] = "",
) -> str:
    """Search for places using Foursquare Places API. Takes a location to search near, a free-text query, a result limit (clamped to 1-50) and optional comma-separated category IDs. Returns a numbered list with address, categories, distance, coordinates, link and place ID."""
    return await _call_tool(
        ctx,
        ToolName.SEARCH_PLACES,
        {"near": near, "query": query, "limit": limit, "categories": categories},
    )


@mcp.tool()
async def get_place_details(
    ctx: Context,
    fsq_place_id: Annotated[Optional[str], Field(description="Foursquare place ID")] = None,
) -> str:
    """Get detailed information about a specific place: address, categories, rating, popularity, price tier, opening hours, phone, email, website, verification status and description."""
    return await _call_tool(ctx, ToolName.GET_PLACE_DETAILS, {"fsq_place_id": fsq_place_id})


@mcp.tool()
async def get_place_photos(
    ctx: Context,
    fsq_place_id: Annotated[Optional[str], Field(description="Foursquare place ID")] = None,
    limit: LimitParam = 10,
) -> str:
    """Get photos for a specific place. Returns size, full-resolution URL and categories for each photo."""
    return await _call_tool(ctx, ToolName.GET_PLACE_PHOTOS, {"fsq_place_id": fsq_place_id, "limit": limit})

# =====================================================================
# AMADEUS ACTIVITY TOOLS
# =====================================================================

@mcp.tool()
async def search_activities(
    ctx: Context,
    city: Annotated[str, Field(description='City name to search activities in (e.g., "Istanbul", "Paris", "New York")')] = "Istanbul",
    type: Annotated[str, Field(description='Type of activity to search for (e.g., "museum", "restaurant", "tour", "boat", "food")')] = "museum",
    limit: LimitParam = 10,
) -> str:
    """Search for activities and attractions in a city using Amadeus API. Finds the city's bounding box via OpenStreetMap, lists the tours and activities inside it, and keeps those whose name, description or category matches the activity type. Returns booking link, price, image and a short description for each."""
    return await _call_tool(ctx, ToolName.SEARCH_ACTIVITIES, {"city": city, "type": type, "limit": limit})


@mcp.tool()
async def get_city_activities(
    ctx: Context,
    city: Annotated[Optional[str], Field(description='City name (e.g., "Istanbul", "Antalya", "Cappadocia")')] = None,
    limit: LimitParam = 20,
) -> str:
    """Get all available activities in a specific city without filtering."""
    return await _call_tool(ctx, ToolName.GET_CITY_ACTIVITIES, {"city": city, "limit": limit})


def main():
    """Entry point for the City Explorer MCP server."""
    import argparse

    parser = argparse.ArgumentParser(description="City Explorer MCP Server")
    parser.add_argument("--transport", type=str, choices=["stdio", "http"], default="stdio", help="Transport type")
    parser.add_argument("--host", type=str, default="0.0.0.0", help="Host for HTTP transport")
    parser.add_argument("--port", type=int, default=None, help="Port for HTTP transport (default: $PORT or 3000)")

    args = parser.parse_args()
    configure_logging()

    if args.transport == "http":
        from city_explorer.http_server import run

        run(host=args.host, port=args.port or get_port())
    else:
        mcp.run(transport="stdio", show_banner=True)


if __name__ == "__main__":
    main()
