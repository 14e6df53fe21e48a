"""Tool registry and the pipelines behind each tool."""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .clients import AmadeusClient, FoursquareClient, GeocodingClient
from .errors import UnknownToolError, ValidationError
from .formatters import (
    format_activities,
    format_photos,
    format_place_details,
    format_place_summary,
    format_places,
)
from .helpers import filter_activities
from .models import (
    Activity,
    CityActivitiesParams,
    PlaceDetailsParams,
    PlacePhotosParams,
    SearchActivitiesParams,
    SearchPlacesParams,
)

logger = logging.getLogger(__name__)


class ToolName(str, Enum):
    SEARCH_PLACES = "search_places"
    GET_PLACE_DETAILS = "get_place_details"
    GET_PLACE_PHOTOS = "get_place_photos"
    SEARCH_ACTIVITIES = "search_activities"
    GET_CITY_ACTIVITIES = "get_city_activities"


TOOL_PARAMS: Dict[ToolName, type[BaseModel]] = {
    ToolName.SEARCH_PLACES: SearchPlacesParams,
    ToolName.GET_PLACE_DETAILS: PlaceDetailsParams,
    ToolName.GET_PLACE_PHOTOS: PlacePhotosParams,
    ToolName.SEARCH_ACTIVITIES: SearchActivitiesParams,
    ToolName.GET_CITY_ACTIVITIES: CityActivitiesParams,
}

_LIMIT_SCHEMA = {"type": "number", "minimum": 1, "maximum": 50}

TOOL_DEFINITIONS: List[Dict[str, Any]] = [
    # Foursquare tools
    {
        "name": ToolName.SEARCH_PLACES.value,
        "description": "Search for places using Foursquare Places API",
        "inputSchema": {
            "type": "object",
            "properties": {
                "near": {
                    "type": "string",
                    "description": 'Location to search near (e.g., "Antalya", "Istanbul")',
                    "default": "Antalya",
                },
                "query": {
                    "type": "string",
                    "description": 'Search query for places (e.g., "restaurant", "cafe", "bazaar")',
                    "default": "restaurant",
                },
                "limit": {**_LIMIT_SCHEMA, "description": "Number of results to return (1-50)", "default": 10},
                "categories": {
                    "type": "string",
                    "description": "Category IDs to filter by (comma-separated)",
                    "default": "",
                },
            },
            "required": ["near", "query"],
        },
    },
    {
        "name": ToolName.GET_PLACE_DETAILS.value,
        "description": "Get detailed information about a specific place",
        "inputSchema": {
            "type": "object",
            "properties": {
                "fsq_place_id": {"type": "string", "description": "Foursquare place ID"},
            },
            "required": ["fsq_place_id"],
        },
    },
    {
        "name": ToolName.GET_PLACE_PHOTOS.value,
        "description": "Get photos for a specific place",
        "inputSchema": {
            "type": "object",
            "properties": {
                "fsq_place_id": {"type": "string", "description": "Foursquare place ID"},
                "limit": {**_LIMIT_SCHEMA, "description": "Number of photos to return (1-50)", "default": 10},
            },
            "required": ["fsq_place_id"],
        },
    },
    # Amadeus tools
    {
        "name": ToolName.SEARCH_ACTIVITIES.value,
        "description": "Search for activities and attractions in a city using Amadeus API",
        "inputSchema": {
            "type": "object",
            "properties": {
                "city": {
                    "type": "string",
                    "description": 'City name to search activities in (e.g., "Istanbul", "Paris", "New York")',
                    "default": "Istanbul",
                },
                "type": {
                    "type": "string",
                    "description": 'Type of activity to search for (e.g., "museum", "restaurant", "tour", "boat", "food")',
                    "default": "museum",
                },
                "limit": {
                    **_LIMIT_SCHEMA,
                    "description": "Maximum number of activities to return (1-50)",
                    "default": 10,
                },
            },
            "required": ["city"],
        },
    },
    {
        "name": ToolName.GET_CITY_ACTIVITIES.value,
        "description": "Get all available activities in a specific city without filtering",
        "inputSchema": {
            "type": "object",
            "properties": {
                "city": {
                    "type": "string",
                    "description": 'City name (e.g., "Istanbul", "Antalya", "Cappadocia")',
                },
                "limit": {**_LIMIT_SCHEMA, "description": "Maximum number of activities to return", "default": 20},
            },
            "required": ["city"],
        },
    },
]


class ToolDispatcher:
    """Runs tool pipelines against the upstream clients.

    ``detailed_place_view`` selects the full place card (rating, hours,
    contact) used by the stdio server; the HTTP server uses the compact one.
    """

    def __init__(
        self,
        foursquare: Optional[FoursquareClient] = None,
        amadeus: Optional[AmadeusClient] = None,
        geocoder: Optional[GeocodingClient] = None,
        detailed_place_view: bool = True,
    ):
        self.foursquare = foursquare or FoursquareClient()
        self.amadeus = amadeus or AmadeusClient()
        self.geocoder = geocoder or GeocodingClient()
        self.detailed_place_view = detailed_place_view

    def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> str:
        """Validate ``arguments`` for the named tool and run it."""
        try:
            tool = ToolName(name)
        except ValueError:
            raise UnknownToolError(f"Unknown tool: {name}")

        try:
            params = TOOL_PARAMS[tool].model_validate(arguments or {})
        except PydanticValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in e.errors()
            )
            raise ValidationError(f"Invalid arguments for {tool.value}: {details}")

        return getattr(self, tool.value)(**params.model_dump())

    # -----------------------------------------------------------------
    # Foursquare
    # -----------------------------------------------------------------

    def search_places(
        self,
        near: str = "Antalya",
        query: str = "restaurant",
        limit: int = 10,
        categories: Optional[str] = "",
    ) -> str:
        places = self.foursquare.search(near=near, query=query, limit=limit, categories=categories)
        return format_places(places, near=near, query=query)

    def get_place_details(self, fsq_place_id: Optional[str] = None) -> str:
        if not fsq_place_id:
            raise ValidationError("fsq_place_id is required")

        place = self.foursquare.get_place(fsq_place_id)
        if self.detailed_place_view:
            return format_place_details(place)
        return format_place_summary(place)

    def get_place_photos(self, fsq_place_id: Optional[str] = None, limit: int = 10) -> str:
        if not fsq_place_id:
            raise ValidationError("fsq_place_id is required")

        return format_photos(self.foursquare.get_photos(fsq_place_id, limit=limit))

    # -----------------------------------------------------------------
    # Amadeus
    # -----------------------------------------------------------------

    def find_activities(self, city: str, activity_type: Optional[str] = None, limit: Optional[int] = 10) -> List[Activity]:
        """Token, bounding box, by-square query, type filter, limit, mapping.

        Any upstream failure aborts the whole lookup; no partial results.
        """
        access_token = self.amadeus.get_token()
        box = self.geocoder.resolve_bounding_box(city)
        items = self.amadeus.activities_by_square(box, access_token)

        items = filter_activities(items, activity_type)
        if limit and limit > 0:
            items = items[:limit]

        activities = [Activity.from_amadeus(item) for item in items]
        logger.info("Found %d activities for %r in %s", len(activities), activity_type or "", city)
        return activities

    def search_activities(self, city: str = "Istanbul", activity_type: Optional[str] = "museum", limit: int = 10) -> str:
        if not city:
            raise ValidationError("city is required")

        activities = self.find_activities(city, activity_type, limit)
        return format_activities(activities, city=city, activity_type=activity_type)

    def get_city_activities(self, city: Optional[str] = None, limit: int = 20) -> str:
        if not city:
            raise ValidationError("city is required")

        activities = self.find_activities(city, "", limit)
        return format_activities(activities, city=city)
