"""Error types raised by the sync and content layers."""

from __future__ import annotations


class GitwikiError(Exception):
    """Base class for gitwiki errors."""


class NotFound(GitwikiError):
    """A path does not exist inside the working copy."""

    def __init__(self, path: str) -> None:
        super().__init__(f"File not found: {path}")
        self.path = path


class Busy(GitwikiError):
    """A sync is already running on this repository."""


class SyncFailure(GitwikiError):
    """Clone, fetch or pull failed (network, auth, missing branch...)."""

    def __init__(self, message: str, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr


class CorruptRepository(GitwikiError):
    """The working copy exists but its HEAD cannot be resolved."""
