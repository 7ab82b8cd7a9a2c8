"""Working copy management."""

from gitwiki.repo.manager import RepoManager, SyncResult
from gitwiki.repo.progress import ProgressCallback

__all__ = ["ProgressCallback", "RepoManager", "SyncResult"]
