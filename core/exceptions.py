"""Error taxonomy for the collector."""

from __future__ import annotations


class CollectorError(Exception):
    """Base exception for the collector."""


class ConfigurationError(CollectorError):
    """Missing or malformed configuration; fatal before any request."""


class ProviderError(CollectorError):
    """The search provider rejected a call or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        if status_code is not None:
            message = f"HTTP {status_code}: {message}"
        super().__init__(message)


class TrendsError(ProviderError):
    """The trending-topic list could not be retrieved."""


class CursorExtractionError(CollectorError):
    """No pagination cursor could be derived from a batch."""


class StorageError(CollectorError):
    """Writing a collection to disk failed."""
