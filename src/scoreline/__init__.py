"""Football data-access layer: cached, de-duplicated, validated API-Football queries."""

__version__ = "0.1.0"
