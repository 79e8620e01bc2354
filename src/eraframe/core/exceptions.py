"""Custom exception hierarchy for eraframe."""

from typing import Any


class EraframeError(Exception):
    """Base exception for all eraframe errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(EraframeError):
    """A required setting is missing or invalid."""

    pass


class CandidateRejectedError(EraframeError):
    """A candidate URL failed validation or the host check."""

    def __init__(
        self,
        message: str,
        url: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.url = url


class NetworkError(EraframeError):
    """An upstream fetch, search or scrape call failed."""

    def __init__(
        self,
        message: str,
        source: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.source = source
        self.status_code = status_code


class StoreUnavailableError(EraframeError):
    """The durable exclusion store could not be reached."""

    pass


class CacheError(EraframeError):
    """Cache operation failed."""

    pass
