"""Custom exception hierarchy for sllive."""

from __future__ import annotations


class SlLiveError(Exception):
    """Base exception for all sllive errors."""


class SlLiveConfigError(SlLiveError):
    """Invalid or missing configuration."""


class SlLiveTransportError(SlLiveError):
    """HTTP-level failure (network, non-200, invalid JSON, unexpected body)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class SlLiveStorageError(SlLiveError):
    """Persisted key-value store could not be read or written."""

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class SlLiveLookupError(SlLiveError):
    """Trip lookup table could not be loaded."""
