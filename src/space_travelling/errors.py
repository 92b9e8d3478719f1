"""Exception hierarchy shared across the application."""

from __future__ import annotations


class SpaceTravellingError(Exception):
    """Base class for application errors."""


class ConfigurationError(SpaceTravellingError):
    """A required setting is missing or malformed. Fatal at startup."""


class UpstreamUnavailableError(SpaceTravellingError):
    """The content API could not be reached or kept failing after retries."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ContentRequestError(SpaceTravellingError):
    """The content API rejected a request (4xx)."""

    def __init__(self, message: str, *, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidCursorError(SpaceTravellingError):
    """A pagination cursor does not point at the configured content API."""
