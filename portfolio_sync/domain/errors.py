from __future__ import annotations


class SyncError(Exception):
    """Base class for every failure that aborts a sync run."""


class ConfigurationError(SyncError):
    """Raised when required configuration is missing or malformed."""


class UpstreamError(SyncError):
    """
    Raised when the GitHub API cannot be read.

    `status` is the HTTP status code, or None when the request never got a
    response (DNS failure, connection refused, timeout).
    """

    def __init__(self, status: int | None, body: str) -> None:
        self.status = status
        self.body   = body
        if status is None:
            super().__init__(f"GitHub API request failed: {body}")
        else:
            super().__init__(f"GitHub API request failed: {status} {body}")


class PersistenceError(SyncError):
    """Raised when the project batch could not be written. Nothing was committed."""
