"""Daemon process that keeps the working copy in sync.

Usage: python -m gitwiki serve

Manages:
- Initial sync (clone on first start)
- Scheduler (periodic fetch/pull + cache sweep)
- Graceful shutdown (SIGTERM/SIGINT)
"""

from __future__ import annotations

import asyncio
import logging
import signal

from gitwiki.config import WikiConfig, load_config
from gitwiki.core import Wiki
from gitwiki.scheduler import SyncScheduler

logger = logging.getLogger(__name__)


class WikiDaemon:
    """Always-on sync process."""

    def __init__(self, config: WikiConfig | None = None) -> None:
        self.config = config or load_config()
        self.wiki = Wiki(self.config)
        self.scheduler = SyncScheduler(self.wiki, self.config.sync.interval)
        self._shutdown_event = asyncio.Event()

    # ── Signal handling ──────────────────────────────────────

    def _setup_signals(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self._handle_signal, sig)

    def _handle_signal(self, sig: signal.Signals) -> None:
        logger.info("Received %s, shutting down...", sig.name)
        self._shutdown_event.set()

    def stop(self) -> None:
        self._shutdown_event.set()

    # ── Main run loop ────────────────────────────────────────

    async def run(self) -> None:
        self._setup_signals()

        logger.info(
            "gitwiki daemon starting (repo=%s, branch=%s, working copy=%s)",
            self.config.repo.url,
            self.config.repo.branch,
            self.wiki.repo.working_copy,
        )

        await self.scheduler.initialize()
        try:
            await self.scheduler.start(self._shutdown_event)
        except asyncio.CancelledError:
            pass
        finally:
            logger.info("gitwiki daemon stopped.")
