"""Utility functions for the City Explorer MCP server."""

import logging
import os
import re
import sys
from typing import Any, Dict, Iterable, List, Optional

from geopy.geocoders import Nominatim
from geopy.extra.rate_limiter import RateLimiter

DEFAULT_PORT = 3000
DEFAULT_REQUEST_TIMEOUT = 10
DEFAULT_FOURSQUARE_API_VERSION = "2025-06-17"
DEFAULT_AMADEUS_BASE_URL = "https://test.api.amadeus.com"
DEFAULT_NOMINATIM_USER_AGENT = "mcp-server/1.0 (contact: admin@example.com)"

MIN_LIMIT = 1
MAX_LIMIT = 50

# Module-level geolocator (initialized once, reused across requests)
_GEOLOCATOR_INSTANCE = None


# =====================================================================
# CONFIGURATION
# =====================================================================

def get_foursquare_api_key() -> str:
    """Get Foursquare Places API key from environment variable."""
    api_key = os.getenv("FOURSQUARE_API_KEY")
    if not api_key:
        raise ValueError("FOURSQUARE_API_KEY environment variable is required")
    return api_key


def get_foursquare_api_version() -> str:
    return os.getenv("FOURSQUARE_API_VERSION") or DEFAULT_FOURSQUARE_API_VERSION


def get_amadeus_credentials() -> tuple:
    """Get the Amadeus (client_id, client_secret) pair from environment variables."""
    api_key = os.getenv("AMADEUS_API_KEY")
    api_secret = os.getenv("AMADEUS_API_SECRET")
    if not api_key or not api_secret:
        raise ValueError("AMADEUS_API_KEY and AMADEUS_API_SECRET environment variables are required")
    return api_key, api_secret


def get_amadeus_base_url() -> str:
    return (os.getenv("AMADEUS_BASE_URL") or DEFAULT_AMADEUS_BASE_URL).rstrip("/")


def get_nominatim_user_agent() -> str:
    """Get the contact User-Agent sent to Nominatim (required by its usage policy)."""
    return os.getenv("NOMINATIM_USER_AGENT") or DEFAULT_NOMINATIM_USER_AGENT


def get_port() -> int:
    """Get the HTTP listening port, falling back to 3000."""
    value = os.getenv("PORT")
    if not value:
        return DEFAULT_PORT
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"PORT must be an integer, got {value!r}")


def get_request_timeout() -> float:
    value = os.getenv("REQUEST_TIMEOUT")
    if not value:
        return DEFAULT_REQUEST_TIMEOUT
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"REQUEST_TIMEOUT must be a number of seconds, got {value!r}")


def get_log_level() -> str:
    return (os.getenv("LOG_LEVEL") or "INFO").upper()


def configure_logging() -> None:
    """Send log records to stderr; stdout carries the stdio MCP protocol."""
    logging.basicConfig(
        level=get_log_level(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


# =====================================================================
# GEOLOCATOR
# =====================================================================

def _get_or_create_geolocator():
    """Get or create a module-level geolocator instance (lazy initialization)."""
    global _GEOLOCATOR_INSTANCE
    if _GEOLOCATOR_INSTANCE is None:
        geolocator = Nominatim(
            user_agent=get_nominatim_user_agent(),
            timeout=get_request_timeout(),
        )
        # One attempt per lookup; failures reach the caller.
        _GEOLOCATOR_INSTANCE = RateLimiter(
            geolocator.geocode,
            min_delay_seconds=1,
            max_retries=0,
            swallow_exceptions=False,
        )
    return _GEOLOCATOR_INSTANCE


def get_geolocator():
    """Get the rate-limited Nominatim geocode callable (cached across requests)."""
    return _get_or_create_geolocator()


# =====================================================================
# REQUEST HELPERS
# =====================================================================

def clamp_limit(value: Any, minimum: int = MIN_LIMIT, maximum: int = MAX_LIMIT) -> int:
    """Clamp a result limit into the closed range [minimum, maximum]."""
    return min(max(int(value), minimum), maximum)


def build_query_params(params: Dict[str, Any]) -> Dict[str, Any]:
    """Drop parameters that are None or empty strings. ``0`` and ``False`` are kept."""
    return {key: value for key, value in params.items() if value is not None and value != ""}


# =====================================================================
# TEXT HELPERS
# =====================================================================

_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")


def html_to_text(html: Optional[str], max_len: int = 180) -> str:
    """Strip HTML tags, collapse whitespace and truncate with an ellipsis.

    Args:
        html: HTML fragment (Amadeus descriptions are HTML)
        max_len: Maximum length of the returned text, ellipsis included

    Returns:
        Plain text of at most ``max_len`` characters
    """
    if not html:
        return ""

    text = _TAG_RE.sub(" ", html)
    text = _WHITESPACE_RE.sub(" ", text).strip()

    if len(text) > max_len:
        return text[: max_len - 1].strip() + "…"
    return text


def filter_activities(items: Iterable[Dict[str, Any]], activity_type: Optional[str]) -> List[Dict[str, Any]]:
    """Keep activities whose name, description or category codes contain ``activity_type``.

    Matching is a case-insensitive substring test. An empty type keeps every item.
    """
    items = list(items)
    if not activity_type:
        return items

    query = activity_type.lower()
    matched = []
    for item in items:
        name = (item.get("name") or "").lower()
        description = (item.get("description") or "").lower()
        categories = " ".join(
            ((classification.get("category") or {}).get("code") or "").lower()
            for classification in item.get("classifications") or []
        )
        if query in f"{name} {description} {categories}":
            matched.append(item)
    return matched
