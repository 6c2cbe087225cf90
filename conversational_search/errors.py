"""
Error taxonomy for the conversational search client.

Configuration and transport errors propagate to the caller unmodified;
only a TransportError raised during a search call is wrapped into a
SearchError. Response extraction never raises.
"""

from __future__ import annotations


class ConversationalSearchError(Exception):
    """Base class for every error raised by this package."""


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class ConfigError(ConversationalSearchError):
    """Configuration could not be loaded or interpreted."""


class ConfigLoadError(ConfigError):
    """The backing key/value source is missing or unreadable."""


class ConfigParseError(ConfigError):
    """A value could not be converted to the type its key requires."""

    def __init__(self, key: str, value: str, expected: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid {expected} for '{key}': {value!r}")


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------

class ConnectionError(ConversationalSearchError):
    """The transport to the cluster could not be established."""


class TransportError(ConversationalSearchError):
    """
    A single request failed: network error, timeout, or non-2xx status.

    ``status_code`` is ``None`` when no HTTP response was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

class SearchError(ConversationalSearchError):
    """A conversational search call failed; ``__cause__`` holds the reason."""


class SerializationError(ConversationalSearchError):
    """The request document could not be serialized (programming error)."""
