"""API client wrappers for the City Explorer MCP server."""

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import requests
from geopy.exc import GeocoderServiceError

from .errors import (
    ConfigurationError,
    NotFoundError,
    UpstreamAuthError,
    UpstreamError,
    UpstreamHTTPError,
)
from .helpers import (
    build_query_params,
    clamp_limit,
    get_amadeus_base_url,
    get_amadeus_credentials,
    get_foursquare_api_key,
    get_foursquare_api_version,
    get_geolocator,
    get_request_timeout,
)
from .models import BoundingBox, Place, PlaceDetails, PlacePhoto

logger = logging.getLogger(__name__)

FOURSQUARE_BASE_URL = "https://places-api.foursquare.com/places"


# =====================================================================
# FOURSQUARE PLACES CLIENT
# =====================================================================

class FoursquareClient:
    """Client for place search, details and photos via the Foursquare Places API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_version: Optional[str] = None,
        base_url: str = FOURSQUARE_BASE_URL,
        timeout: Optional[float] = None,
    ):
        self.base_url = base_url
        if api_key is None:
            try:
                api_key = get_foursquare_api_key()
            except ValueError:
                api_key = None
        self.api_key = api_key
        self.api_version = api_version or get_foursquare_api_version()
        self.timeout = timeout or get_request_timeout()

    def _request(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Make an authenticated GET request to the Places API."""
        if not self.api_key:
            raise ConfigurationError("FOURSQUARE_API_KEY environment variable not set")

        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "X-Places-Api-Version": self.api_version,
        }
        try:
            response = requests.get(
                f"{self.base_url}{endpoint}",
                params=build_query_params(params or {}),
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise UpstreamError(f"Foursquare request failed: {str(e)}") from e

        if not response.ok:
            logger.warning("Foursquare %s failed with %s: %s", endpoint, response.status_code, response.text)
            raise UpstreamHTTPError(
                f"HTTP {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        return response.json()

    def search(self, near: str, query: str, limit: int = 10, categories: Optional[str] = None) -> List[Place]:
        """Search for places matching ``query`` near a named location."""
        data = self._request(
            "/search",
            {"near": near, "query": query, "limit": clamp_limit(limit), "categories": categories},
        )
        results = data.get("results") or []
        logger.info("Foursquare /search near %r matching %r returned %d results", near, query, len(results))
        return [Place.from_foursquare(raw) for raw in results]

    def get_place(self, fsq_place_id: str) -> PlaceDetails:
        """Get the full record of a place by its Foursquare identifier."""
        data = self._request(f"/{quote(fsq_place_id, safe='')}")
        return PlaceDetails.from_foursquare(data)

    def get_photos(self, fsq_place_id: str, limit: int = 10) -> List[PlacePhoto]:
        """Get photos for a place."""
        data = self._request(f"/{quote(fsq_place_id, safe='')}/photos", {"limit": clamp_limit(limit)})
        if not isinstance(data, list):
            return []
        return [PlacePhoto.from_foursquare(raw) for raw in data]


# =====================================================================
# AMADEUS CLIENTS
# =====================================================================

class AmadeusTokenCache:
    """Holds one Amadeus OAuth2 access token and refreshes it when it expires.

    The stored expiry already includes a safety margin, so a token is reused
    only while ``clock() < expires_at``. Refreshes are serialized with a lock
    because the HTTP transport serves requests from a threadpool.
    """

    EXPIRY_MARGIN_SECONDS = 60

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        clock: Callable[[], float] = time.time,
        timeout: Optional[float] = None,
    ):
        if client_id is None and client_secret is None:
            try:
                client_id, client_secret = get_amadeus_credentials()
            except ValueError:
                pass
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = f"{base_url or get_amadeus_base_url()}/v1/security/oauth2/token"
        self.clock = clock
        self.timeout = timeout or get_request_timeout()
        self.access_token: Optional[str] = None
        self.expires_at: Optional[float] = None
        self._lock = threading.Lock()

    def get_token(self) -> str:
        """Return the cached token, fetching a new one when absent or expired."""
        with self._lock:
            if self.access_token and self.expires_at is not None and self.clock() < self.expires_at:
                return self.access_token
            return self._refresh()

    def invalidate(self) -> None:
        with self._lock:
            self.access_token = None
            self.expires_at = None

    def _refresh(self) -> str:
        if not self.client_id or not self.client_secret:
            raise ConfigurationError("AMADEUS_API_KEY and AMADEUS_API_SECRET environment variables not set")

        logger.info("Requesting new Amadeus access token")
        try:
            response = requests.post(
                self.token_url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise UpstreamError(f"Amadeus OAuth request failed: {str(e)}") from e

        if not response.ok:
            logger.warning("Amadeus OAuth failed with %s", response.status_code)
            raise UpstreamAuthError(
                f"Amadeus OAuth failed: {response.status_code} {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        payload = response.json()
        token = payload.get("access_token")
        if not token:
            raise UpstreamAuthError(
                "Amadeus OAuth response did not include an access token",
                status_code=response.status_code,
                body=response.text,
            )

        expires_in = float(payload.get("expires_in", 1799))
        self.access_token = token
        self.expires_at = self.clock() + expires_in - self.EXPIRY_MARGIN_SECONDS
        logger.info("Amadeus access token obtained, expires in %ss", int(expires_in))
        return token


class AmadeusClient:
    """Client for the Amadeus Tours & Activities API."""

    def __init__(
        self,
        token_cache: Optional[AmadeusTokenCache] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = base_url or get_amadeus_base_url()
        self.token_cache = token_cache or AmadeusTokenCache(base_url=self.base_url)
        self.timeout = timeout or get_request_timeout()

    def get_token(self) -> str:
        return self.token_cache.get_token()

    def activities_by_square(self, box: BoundingBox, access_token: str) -> List[Dict[str, Any]]:
        """Get raw activity records inside a bounding box, in provider order."""
        try:
            response = requests.get(
                f"{self.base_url}/v1/shopping/activities/by-square",
                params={"north": box.north, "west": box.west, "south": box.south, "east": box.east},
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise UpstreamError(f"Amadeus activities request failed: {str(e)}") from e

        if not response.ok:
            logger.warning("Amadeus activities failed with %s: %s", response.status_code, response.text)
            raise UpstreamHTTPError(
                f"Amadeus activities API failed: {response.status_code} {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        return response.json().get("data") or []


# =====================================================================
# NOMINATIM GEOCODING CLIENT
# =====================================================================

class GeocodingClient:
    """Client for city bounding boxes via Nominatim."""

    def __init__(self, geocode: Optional[Callable[..., Any]] = None):
        self.geocode_limiter = geocode or get_geolocator()

    def resolve_bounding_box(self, city: str) -> BoundingBox:
        """Look up ``city`` and return the bounding box of the best match."""
        logger.info("Getting coordinates for %r", city)
        try:
            location = self.geocode_limiter(city, exactly_one=True, addressdetails=True)
        except GeocoderServiceError as e:
            # geopy chains the adapter error, which carries the HTTP status
            cause = e.__cause__
            status = getattr(cause, "status_code", None)
            raise UpstreamHTTPError(
                f"Nominatim API failed: {status if status is not None else str(e)}",
                status_code=status,
                body=getattr(cause, "text", "") or "",
            ) from e

        if not location:
            raise NotFoundError(f"No location found for: {city}")

        boundingbox = (location.raw or {}).get("boundingbox")
        if not boundingbox or len(boundingbox) < 4:
            raise NotFoundError(f"No bounding box found for: {city}")

        box = BoundingBox.from_nominatim(boundingbox)
        logger.info("Coordinates found: N:%s, W:%s, S:%s, E:%s", box.north, box.west, box.south, box.east)
        return box
