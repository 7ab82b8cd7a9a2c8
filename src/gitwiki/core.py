"""Wiki orchestrator. Wires the working copy, tree builder, renderer and cache.

Responsibilities:
1. Sync: run RepoManager.sync_once and invalidate derived caches on change
2. Listing: flat file list + navigation tree, cached under "posts"
3. Search: filtered tree rebuilt from the flat list, never cached
4. Documents: rendered Markdown or a PDF stub, cached under "post"
"""

from __future__ import annotations

import logging

from gitwiki.cache import TTLCache, default_cache
from gitwiki.config import WikiConfig
from gitwiki.content import build_tree, filter_files
from gitwiki.repo import ProgressCallback, RepoManager, SyncResult
from gitwiki.render import parse
from gitwiki.render.parser import UNTITLED

logger = logging.getLogger(__name__)

LISTING_NAMESPACE = "posts"
DOCUMENT_NAMESPACE = "post"
CONFIG_NAMESPACE = "config"

# Flushed whenever a sync reports new content.
INVALIDATED_ON_UPDATE = (LISTING_NAMESPACE, CONFIG_NAMESPACE)


class Wiki:
    """Serving-layer facade over one tracked repository."""

    def __init__(
        self,
        config: WikiConfig,
        *,
        cache: TTLCache | None = None,
        progress: ProgressCallback | None = None,
    ) -> None:
        self.config = config
        self.cache = cache if cache is not None else default_cache
        self.repo = RepoManager(
            config.repo,
            progress=progress,
            timestamp_concurrency=config.sync.timestamp_concurrency,
        )

    # ── Sync ─────────────────────────────────────────────────

    async def sync(self) -> SyncResult:
        result = await self.repo.sync_once()
        if result.updated:
            self.invalidate()
        return result

    def invalidate(self) -> None:
        for namespace in INVALIDATED_ON_UPDATE:
            self.cache.delete(namespace)
        logger.info("Cleared cache namespaces: %s", ", ".join(INVALIDATED_ON_UPDATE))

    # ── Listing / search ─────────────────────────────────────

    async def listing(self) -> dict:
        """{"tree": ..., "flat": [...]} for the whole content path."""
        return await self.cache.get_or_compute(LISTING_NAMESPACE, "", self._build_listing)

    async def _build_listing(self) -> dict:
        files = await self.repo.list_content_files(self.config.repo.content_path)
        return {
            "tree": build_tree(files).to_dict(),
            "flat": [f.to_dict() for f in files],
        }

    async def search(self, keyword: str) -> dict:
        files = await self.repo.list_content_files(self.config.repo.content_path)
        matches = filter_files(files, keyword)
        return {
            "keyword": keyword,
            "tree": build_tree(matches).to_dict(),
            "flat": [f.to_dict() for f in matches],
        }

    # ── Documents ────────────────────────────────────────────

    async def document(self, path: str) -> dict:
        """Rendered document for path. Raises NotFound."""
        path = path.lstrip("/")

        async def build() -> dict:
            info = await self.repo.get_file_info(path)
            if info.type == "pdf":
                return {
                    "type": "pdf",
                    "path": path,
                    "title": info.display_name,
                    "description": "PDF document",
                    "html": "",
                    "fileInfo": info.to_dict(),
                }

            text = await self.repo.read_file(path)
            parsed = parse(text, path, asset_prefix=self.config.asset_prefix)
            data = parsed.to_dict()
            if parsed.title == UNTITLED:
                data["title"] = info.display_name
            data.update(type="markdown", path=path, fileInfo=info.to_dict())
            return data

        return await self.cache.get_or_compute(DOCUMENT_NAMESPACE, path, build)
