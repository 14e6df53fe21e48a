"""Tests for city_explorer.helpers module."""
import logging

import pytest

from city_explorer.helpers import (
    build_query_params,
    clamp_limit,
    configure_logging,
    filter_activities,
    get_amadeus_base_url,
    get_amadeus_credentials,
    get_foursquare_api_key,
    get_foursquare_api_version,
    get_geolocator,
    get_nominatim_user_agent,
    get_port,
    get_request_timeout,
    html_to_text,
)


class TestConfigurationHelpers:
    """Test environment-backed configuration getters."""

    def test_get_foursquare_api_key_success(self, monkeypatch):
        monkeypatch.setenv("FOURSQUARE_API_KEY", "fsq-key-xyz")
        assert get_foursquare_api_key() == "fsq-key-xyz"

    def test_get_foursquare_api_key_missing(self, monkeypatch):
        """Test ValueError when the Foursquare key is missing."""
        monkeypatch.delenv("FOURSQUARE_API_KEY", raising=False)
        with pytest.raises(ValueError, match="FOURSQUARE_API_KEY.*required"):
            get_foursquare_api_key()

    def test_get_amadeus_credentials_success(self):
        assert get_amadeus_credentials() == ("test-amadeus-key-12345", "test-amadeus-secret-12345")

    def test_get_amadeus_credentials_missing_secret(self, monkeypatch):
        monkeypatch.delenv("AMADEUS_API_SECRET", raising=False)
        with pytest.raises(ValueError, match="AMADEUS_API_SECRET"):
            get_amadeus_credentials()

    def test_defaults(self, monkeypatch):
        """Test fallbacks when optional settings are absent."""
        monkeypatch.delenv("NOMINATIM_USER_AGENT", raising=False)
        monkeypatch.delenv("REQUEST_TIMEOUT", raising=False)
        assert get_port() == 3000
        assert get_foursquare_api_version() == "2025-06-17"
        assert get_amadeus_base_url() == "https://test.api.amadeus.com"
        assert get_request_timeout() == 10
        assert "contact" in get_nominatim_user_agent()

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("AMADEUS_BASE_URL", "https://api.amadeus.com/")
        monkeypatch.setenv("NOMINATIM_USER_AGENT", "city-explorer-tests (ops@example.org)")
        monkeypatch.setenv("REQUEST_TIMEOUT", "2.5")
        assert get_port() == 8080
        assert get_amadeus_base_url() == "https://api.amadeus.com"
        assert get_nominatim_user_agent() == "city-explorer-tests (ops@example.org)"
        assert get_request_timeout() == 2.5

    def test_invalid_port(self, monkeypatch):
        monkeypatch.setenv("PORT", "http")
        with pytest.raises(ValueError, match="PORT"):
            get_port()

    def test_configure_logging_uses_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        root = logging.getLogger()
        previous_handlers, previous_level = root.handlers[:], root.level
        root.handlers = []
        try:
            configure_logging()
            assert root.level == logging.DEBUG
        finally:
            root.handlers = previous_handlers
            root.setLevel(previous_level)


class TestGeolocator:
    """Test geolocator initialization and configuration."""

    def test_get_geolocator_is_callable(self):
        assert callable(get_geolocator())

    def test_get_geolocator_returns_cached_instance(self):
        assert get_geolocator() is get_geolocator()

    def test_get_geolocator_does_not_retry_or_swallow(self):
        limiter = get_geolocator()
        assert limiter.max_retries == 0
        assert limiter.swallow_exceptions is False


class TestClampLimit:
    @pytest.mark.parametrize(
        "value, expected",
        [(0, 1), (-7, 1), (1, 1), (25, 25), (50, 50), (51, 50), (1000, 50), ("5", 5)],
    )
    def test_clamps_into_range(self, value, expected):
        assert clamp_limit(value) == expected


class TestBuildQueryParams:
    def test_drops_none_and_empty(self):
        params = build_query_params({"near": "Antalya", "categories": "", "ll": None, "limit": 10})
        assert params == {"near": "Antalya", "limit": 10}

    def test_keeps_zero_and_false(self):
        assert build_query_params({"offset": 0, "open_now": False}) == {"offset": 0, "open_now": False}


class TestHtmlToText:
    def test_strips_tags_and_collapses_whitespace(self):
        assert html_to_text("<p>Visit  the <b>Blue</b>\n\tMosque</p>") == "Visit the Blue Mosque"

    def test_short_text_unchanged(self):
        assert html_to_text("Short description", max_len=300) == "Short description"

    def test_exact_length_unchanged(self):
        text = "a" * 300
        assert html_to_text(text, max_len=300) == text

    def test_long_text_truncated_with_ellipsis(self):
        result = html_to_text("b" * 400, max_len=300)
        assert len(result) == 300
        assert result == "b" * 299 + "…"

    def test_empty_input(self):
        assert html_to_text(None) == ""
        assert html_to_text("") == ""


class TestFilterActivities:
    ITEMS = [
        {"name": "Archaeology Museum", "description": "Ancient artefacts"},
        {"name": "Boat trip", "description": "Visit the MUSEUM island"},
        {"name": "Old town", "description": "Walk", "classifications": [{"category": {"code": "MUSEUM_TOUR"}}]},
        {"name": "Food tour", "description": None},
    ]

    def test_matches_name_description_and_category_case_insensitively(self):
        result = filter_activities(self.ITEMS, "Museum")
        assert [item["name"] for item in result] == ["Archaeology Museum", "Boat trip", "Old town"]

    def test_empty_type_keeps_everything(self):
        assert filter_activities(self.ITEMS, "") == self.ITEMS
        assert filter_activities(self.ITEMS, None) == self.ITEMS

    def test_no_match(self):
        assert filter_activities(self.ITEMS, "skydiving") == []
