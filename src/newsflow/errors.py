"""Domain errors raised by the service layer and translated by the API."""

from __future__ import annotations

__all__ = [
    "ConfigurationError",
    "InvalidRequestError",
    "NewsFlowError",
    "ProviderError",
    "UnauthenticatedError",
]


class NewsFlowError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidRequestError(NewsFlowError):
    """Required input is missing or unusable."""

    status_code = 400


class ConfigurationError(NewsFlowError):
    """No usable provider credential could be resolved."""

    status_code = 400


class UnauthenticatedError(NewsFlowError):
    """The request carries no authenticated session."""

    status_code = 401

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class ProviderError(NewsFlowError):
    """An upstream provider failed or returned an unusable payload."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message)
        self.status_code = status_code
