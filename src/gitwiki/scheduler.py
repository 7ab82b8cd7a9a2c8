"""Periodic repository sync using pure asyncio.

Each tick:
- Sweep expired cache entries
- Sync the working copy, unless a sync is still running or the repository
  has never synchronized successfully (ticks are skipped, never queued)
"""

from __future__ import annotations

import asyncio
import logging

from gitwiki.core import CONFIG_NAMESPACE, Wiki
from gitwiki.errors import Busy, GitwikiError
from gitwiki.repo import SyncResult

logger = logging.getLogger(__name__)


class SyncScheduler:
    """Drives Wiki.sync on a fixed interval."""

    def __init__(self, wiki: Wiki, interval: float) -> None:
        self._wiki = wiki
        self._interval = interval
        self.initialized = False

    async def initialize(self) -> SyncResult | None:
        """First sync. Failure is logged; the process keeps serving."""
        try:
            result = await self._wiki.sync()
        except GitwikiError as e:
            logger.error("Initial sync failed: %s", e)
            self.initialized = False
            return None

        self.initialized = True
        # Config pages may point at documents that only now exist.
        self._wiki.cache.delete(CONFIG_NAMESPACE)
        logger.info("Initial sync complete (new clone: %s)", result.is_new)
        return result

    async def start(self, shutdown_event: asyncio.Event) -> None:
        """Run ticks until shutdown_event is set."""
        logger.info("Scheduler started (sync every %ss)", self._interval)

        while not shutdown_event.is_set():
            try:
                await asyncio.wait_for(shutdown_event.wait(), timeout=self._interval)
                break  # shutdown requested
            except asyncio.TimeoutError:
                pass  # interval elapsed

            self._wiki.cache.sweep_expired()
            await self.tick()

        logger.info("Scheduler stopped.")

    async def tick(self) -> SyncResult | None:
        if self._wiki.repo.operating:
            logger.info("Skipping sync: a git operation is in progress")
            return None
        if not self.initialized:
            logger.info("Skipping sync: repository not initialized")
            return None

        try:
            result = await self._wiki.sync()
        except Busy:
            return None
        except GitwikiError as e:
            logger.error("Auto sync failed: %s", e)
            return None

        if result.updated:
            logger.info("Auto sync pulled new content")
        return result
