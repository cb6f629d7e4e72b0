"""Exception hierarchy shared by the proxy and the browsing client."""

from __future__ import annotations


class CineScopeError(Exception):
    """Base class for application errors."""


class NetworkError(CineScopeError):
    """A movie-data fetch failed or the provider answered with a non-2xx status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NotFoundError(NetworkError):
    """The requested movie does not exist upstream."""

    def __init__(self, resource: str, identifier: object) -> None:
        super().__init__(f"{resource} with ID {identifier} not found", status_code=404)
        self.resource = resource
        self.identifier = identifier


class ValidationError(CineScopeError):
    """User input was rejected before any network call was made."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


class AuthenticationError(CineScopeError):
    """Credentials were wrong or no session is active."""


class StorageError(CineScopeError):
    """Local key-value storage could not be read or written."""
