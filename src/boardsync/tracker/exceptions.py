"""Custom exceptions for the Tracker Gateway."""

from __future__ import annotations


class TrackerError(Exception):
    """Base exception for Tracker Gateway errors."""


class TransportError(TrackerError):
    """A request to the tracker could not be completed.

    Attributes:
        status: HTTP status code, if the tracker answered.
        retryable: Whether repeating the request is known to be safe and useful.
    """

    def __init__(self, message: str, status: int | None = None, retryable: bool = False) -> None:
        super().__init__(message)
        self.status = status
        self.retryable = retryable


class ProjectNotFoundError(TrackerError):
    """No project matches the requested selector."""


class AmbiguousProjectError(TrackerError):
    """More than one project carries the requested title."""


class CreateFailedError(TrackerError):
    """Issue creation failed."""

    def __init__(self, message: str, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class LinkFailedError(TrackerError):
    """Linking an issue to the project failed."""

    def __init__(self, message: str, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable
