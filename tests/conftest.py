"""Shared pytest fixtures for city_explorer tests."""

from unittest.mock import Mock

import pytest

from city_explorer.clients import AmadeusClient, AmadeusTokenCache, FoursquareClient, GeocodingClient
from city_explorer.tools import ToolDispatcher

FOURSQUARE_URL = "https://places-api.foursquare.com/places"
AMADEUS_URL = "https://test.api.amadeus.com"
TOKEN_URL = f"{AMADEUS_URL}/v1/security/oauth2/token"
ACTIVITIES_URL = f"{AMADEUS_URL}/v1/shopping/activities/by-square"

# Nominatim order: south, north, west, east
ISTANBUL_BOUNDINGBOX = ["40.8027", "41.3201", "28.5950", "29.4583"]


class FakeClock:
    """Manually advanced replacement for time.time."""

    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture(autouse=True)
def mock_env_vars(monkeypatch):
    """Automatically set environment variables for all tests."""
    monkeypatch.setenv("FOURSQUARE_API_KEY", "test-foursquare-key-12345")
    monkeypatch.setenv("AMADEUS_API_KEY", "test-amadeus-key-12345")
    monkeypatch.setenv("AMADEUS_API_SECRET", "test-amadeus-secret-12345")
    monkeypatch.delenv("AMADEUS_BASE_URL", raising=False)
    monkeypatch.delenv("FOURSQUARE_API_VERSION", raising=False)
    monkeypatch.delenv("PORT", raising=False)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def geocode():
    """Stand-in for the rate-limited Nominatim geocode callable."""
    return Mock(return_value=Mock(raw={"boundingbox": ISTANBUL_BOUNDINGBOX}))


@pytest.fixture
def token_cache(clock):
    return AmadeusTokenCache(clock=clock)


@pytest.fixture
def dispatcher(token_cache, geocode):
    return ToolDispatcher(
        foursquare=FoursquareClient(),
        amadeus=AmadeusClient(token_cache=token_cache),
        geocoder=GeocodingClient(geocode=geocode),
        detailed_place_view=True,
    )


def token_payload(token="token-1", expires_in=1799):
    return {"type": "amadeusOAuth2Token", "access_token": token, "expires_in": expires_in}


SEARCH_RESULTS = {
    "results": [
        {
            "fsq_place_id": "4b5ad3f2f964a520a0d128e3",
            "name": "7 Mehmet",
            "location": {"formatted_address": "Dumlupınar Blv. No:201, 07070 Antalya", "country": "TR"},
            "categories": [{"name": "Turkish Restaurant"}, {"name": "Kebab Restaurant"}],
            "distance": 3120,
            "latitude": 36.8841,
            "longitude": 30.6617,
            "link": "/places/4b5ad3f2f964a520a0d128e3",
        },
        {
            "fsq_place_id": "51a8b7c0498e6f3e1d2b2a11",
            "name": "Vanilla Lounge",
            "location": {"country": "TR"},
            "categories": [{"name": "Restaurant"}],
            "distance": 850,
            "latitude": 36.8847,
            "longitude": 30.7040,
        },
        {
            "fsq_place_id": "5e1c0a9f2a3d4b0008c6e4d2",
            "name": "Seraser Fine Dining",
        },
    ]
}

ACTIVITIES = {
    "data": [
        {
            "id": "23642",
            "name": "Hagia Sophia Skip-the-Line Tour",
            "description": "<p>Explore the   <b>Hagia Sophia</b> museum\nwith a guide.</p>",
            "bookingLink": "https://b2c.mla.cloud/c/QCejqyor?c=2WxbgL36",
            "price": {"amount": "45.00", "currencyCode": "EUR"},
            "pictures": ["https://images.example.com/hagia-sophia.jpg", "https://images.example.com/second.jpg"],
        },
        {
            "id": "23643",
            "name": "Bosphorus Sunset Cruise",
            "description": "Cruise between two continents.",
            "self": {"href": "https://test.api.amadeus.com/v1/shopping/activities/23643"},
            "price": {},
            "pictures": [],
        },
        {
            "id": "23644",
            "name": "Topkapi Palace Visit",
            "description": "Ottoman imperial residence.",
            "bookingLink": "https://b2c.mla.cloud/c/Topkapi",
            "price": {"amount": "30.00", "currencyCode": "EUR"},
            "classifications": [{"category": {"code": "MUSEUM"}}],
        },
    ]
}
