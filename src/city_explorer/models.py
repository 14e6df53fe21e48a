"""Data models for the City Explorer MCP server."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from city_explorer.helpers import html_to_text

ACTIVITY_DESCRIPTION_LENGTH = 300

# =====================================================================
# PLACE MODELS (FOURSQUARE)
# =====================================================================


class Place(BaseModel):
    """A single Foursquare search result.

    Optional provider fields stay ``None`` here; placeholder text is chosen
    by the formatters at render time.
    """

    fsq_place_id: Optional[str] = None
    name: Optional[str] = None
    address: Optional[str] = None
    categories: List[str] = Field(default_factory=list)
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    distance: Optional[float] = Field(None, description="Distance from the query origin in metres")
    link: Optional[str] = None

    @classmethod
    def from_foursquare(cls, raw: Dict[str, Any]) -> "Place":
        return cls(**_place_fields(raw))


class PlaceDetails(Place):
    """A Foursquare place looked up by identifier.

    ``address`` falls back to the country like search results do;
    ``formatted_address`` keeps only the street address.
    """

    formatted_address: Optional[str] = None
    rating: Optional[float] = None
    popularity: Optional[float] = None
    price: Optional[int] = None
    hours: Any = None
    website: Optional[str] = None
    tel: Optional[str] = None
    email: Optional[str] = None
    social_media: Any = None
    verified: bool = False
    description: Optional[str] = None

    @classmethod
    def from_foursquare(cls, raw: Dict[str, Any]) -> "PlaceDetails":
        return cls(
            **_place_fields(raw),
            formatted_address=(raw.get("location") or {}).get("formatted_address"),
            rating=raw.get("rating"),
            popularity=raw.get("popularity"),
            price=raw.get("price"),
            hours=raw.get("hours"),
            website=raw.get("website"),
            tel=raw.get("tel"),
            email=raw.get("email"),
            social_media=raw.get("social_media"),
            verified=bool(raw.get("verified")),
            description=raw.get("description"),
        )


class PlacePhoto(BaseModel):
    """A photo attached to a Foursquare place."""

    width: Optional[int] = None
    height: Optional[int] = None
    prefix: str = ""
    suffix: str = ""
    categories: List[str] = Field(default_factory=list)

    @property
    def url(self) -> str:
        return f"{self.prefix}original{self.suffix}"

    @classmethod
    def from_foursquare(cls, raw: Dict[str, Any]) -> "PlacePhoto":
        return cls(
            width=raw.get("width"),
            height=raw.get("height"),
            prefix=raw.get("prefix") or "",
            suffix=raw.get("suffix") or "",
            categories=[str(c) for c in raw.get("categories") or []],
        )


def _place_fields(raw: Dict[str, Any]) -> Dict[str, Any]:
    location = raw.get("location") or {}
    return {
        "fsq_place_id": raw.get("fsq_place_id"),
        "name": raw.get("name"),
        "address": location.get("formatted_address") or location.get("country"),
        "categories": [c["name"] for c in raw.get("categories") or [] if c.get("name")],
        "latitude": raw.get("latitude"),
        "longitude": raw.get("longitude"),
        "distance": raw.get("distance"),
        "link": raw.get("link"),
    }


# =====================================================================
# ACTIVITY MODELS (AMADEUS)
# =====================================================================


class ActivityPrice(BaseModel):
    amount: Optional[str] = None
    currency: Optional[str] = None


class Activity(BaseModel):
    """A tour or activity from the Amadeus by-square search."""

    name: Optional[str] = None
    link: Optional[str] = None
    price: ActivityPrice = Field(default_factory=ActivityPrice)
    image: Optional[str] = None
    description: str = ""

    @classmethod
    def from_amadeus(cls, item: Dict[str, Any], description_length: int = ACTIVITY_DESCRIPTION_LENGTH) -> "Activity":
        price = item.get("price") or {}
        pictures = item.get("pictures") or []
        amount = price.get("amount")
        return cls(
            name=item.get("name"),
            link=item.get("bookingLink") or (item.get("self") or {}).get("href"),
            price=ActivityPrice(
                amount=str(amount) if amount is not None else None,
                currency=price.get("currencyCode"),
            ),
            image=pictures[0] if pictures else None,
            description=html_to_text(item.get("description") or "", description_length),
        )


class BoundingBox(BaseModel):
    """Geographic rectangle in decimal degrees."""

    north: float
    south: float
    west: float
    east: float

    @classmethod
    def from_nominatim(cls, boundingbox: List[Any]) -> "BoundingBox":
        """Build from Nominatim's ``[south, north, west, east]`` string array."""
        south, north, west, east = (float(edge) for edge in boundingbox[:4])
        return cls(north=north, south=south, west=west, east=east)


# =====================================================================
# TOOL PARAMETER MODELS
# =====================================================================


class SearchPlacesParams(BaseModel):
    """Parameters for the search_places tool."""

    near: str = Field("Antalya", description='Location to search near (e.g., "Antalya", "Istanbul")')
    query: str = Field("restaurant", description='Search query for places (e.g., "restaurant", "cafe", "bazaar")')
    limit: int = Field(10, description="Number of results to return (1-50)")
    categories: Optional[str] = Field("", description="Category IDs to filter by (comma-separated)")


class PlaceDetailsParams(BaseModel):
    """Parameters for the get_place_details tool."""

    fsq_place_id: Optional[str] = Field(None, description="Foursquare place ID")


class PlacePhotosParams(BaseModel):
    """Parameters for the get_place_photos tool."""

    fsq_place_id: Optional[str] = Field(None, description="Foursquare place ID")
    limit: int = Field(10, description="Number of photos to return (1-50)")


class SearchActivitiesParams(BaseModel):
    """Parameters for the search_activities tool."""

    model_config = ConfigDict(populate_by_name=True)

    city: str = Field("Istanbul", description="City name to search activities in")
    activity_type: Optional[str] = Field(
        "museum",
        alias="type",
        description="Type of activity to search for (e.g., 'museum', 'tour', 'food')",
    )
    limit: int = Field(10, description="Maximum number of activities to return (1-50)")


class CityActivitiesParams(BaseModel):
    """Parameters for the get_city_activities tool."""

    city: Optional[str] = Field(None, description="City name (e.g., 'Istanbul', 'Antalya', 'Cappadocia')")
    limit: int = Field(20, description="Maximum number of activities to return")
