"""Exception types raised by the City Explorer clients and tool pipelines."""

from typing import Optional


class CityExplorerError(Exception):
    """Base class for every error surfaced to a transport."""


class ValidationError(CityExplorerError):
    """A required tool argument is missing or malformed."""


class ConfigurationError(CityExplorerError):
    """A required credential or setting is not configured."""


class UpstreamError(CityExplorerError):
    """An upstream provider call failed."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UpstreamHTTPError(UpstreamError):
    """An upstream provider answered with a non-success status."""


class UpstreamAuthError(UpstreamError):
    """The Amadeus OAuth exchange was rejected."""


class NotFoundError(CityExplorerError):
    """The geocoder returned no result for a place name."""


class UnknownToolError(CityExplorerError):
    """The requested tool name is not registered."""


class UnknownMethodError(CityExplorerError):
    """The requested MCP method is not supported by the HTTP transport."""
