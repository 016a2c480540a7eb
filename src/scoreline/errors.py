"""Error taxonomy for football data queries.

Every error carries a short ``user_message`` that the query service hands back
to callers as ``QueryResult.error``; none of these escape that boundary.
"""

from __future__ import annotations

MISSING_KEY_MARKER = "FOOTBALL_API_KEY not found"


class FootballDataError(RuntimeError):
    """Base error for football data operations."""

    kind = "unknown"
    default_message = "Unknown error occurred"

    def __init__(self, message: str | None = None) -> None:
        self.user_message = message or self.default_message
        super().__init__(self.user_message)


class ConfigurationError(FootballDataError):
    """Raised when the provider credential or endpoint is not configured."""

    kind = "configuration"
    default_message = "API service is not configured. Please contact the administrator."


class TransportError(FootballDataError):
    """Raised when the remote call could not complete at all."""

    kind = "transport"
    default_message = "Unable to connect to service. Please check your internet connection."


class ServiceError(FootballDataError):
    """Raised when the service answered but reported a failure."""

    kind = "service"
    default_message = "Service error occurred"


class MalformedResponseError(FootballDataError):
    """Raised when the response envelope is not a JSON object."""

    kind = "malformed"
    default_message = "Malformed response received from API"


class DataValidationError(FootballDataError):
    """Raised when every record of a non-empty batch failed validation."""

    kind = "validation"
    default_message = "Invalid data received from API"


class InvalidQueryError(FootballDataError):
    """Raised when caller-supplied query parameters are rejected."""

    kind = "input"
    default_message = "Invalid query parameters"
