"""Base exception classes for domain-level errors.

Two families hang off ``DomainError``:

- ``MediaError`` covers failures scoped to a single queued item. They are
  reported through the item's error callback and the queue moves on.
- ``SessionError`` covers failures of the voice session itself. They end the
  subscription that owns the session.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state


# === Per-item errors ===


class MediaError(DomainError):
    """Base for errors that only affect one media item."""


class UnsupportedSourceError(MediaError):
    """Raised when a direct URL points at a source we cannot stream."""

    def __init__(self, url: str, message: str | None = None) -> None:
        super().__init__(message or f"Unsupported URL: {url}", code="UNSUPPORTED_SOURCE")
        self.url = url


class ResolutionFailureError(MediaError):
    """Raised when search, metadata lookup, stream spawn or probe fails."""

    def __init__(self, query: str, message: str | None = None) -> None:
        super().__init__(message or f"No track found for '{query}'", code="RESOLUTION_FAILURE")
        self.query = query


class PlaybackError(MediaError):
    """Raised when the platform player fails while a resource is active."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message, code="PLAYBACK_ERROR")
        self.cause = cause


# === Session-level errors ===


class SessionError(DomainError):
    """Base for errors that are fatal to a voice session."""


class ConnectionTimeoutError(SessionError):
    """Raised when a session does not reach the expected state in time."""

    def __init__(self, expected: str, timeout: float) -> None:
        super().__init__(
            f"Voice session did not become {expected} within {timeout:g}s",
            code="CONNECTION_TIMEOUT",
        )
        self.expected = expected
        self.timeout = timeout


class SessionRemovedError(SessionError):
    """Raised when the bot was removed (kicked) from the voice channel."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "Removed from the voice channel", code="SESSION_REMOVED")


class RejoinExhaustedError(SessionError):
    """Raised when the rejoin ceiling is reached without recovering."""

    def __init__(self, attempts: int) -> None:
        super().__init__(
            f"Gave up reconnecting after {attempts} attempts", code="REJOIN_EXHAUSTED"
        )
        self.attempts = attempts
