"""Tests for the Wiki orchestrator."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from gitwiki.cache import TTLCache
from gitwiki.config import RepoConfig, WikiConfig
from gitwiki.content import ContentFile
from gitwiki.core import Wiki
from gitwiki.errors import NotFound
from gitwiki.repo import SyncResult


def make_file(path: str, day: int) -> ContentFile:
    name = path.rsplit("/", 1)[-1]
    stamp = datetime(2024, 1, day, tzinfo=timezone.utc)
    return ContentFile(
        path=path,
        name=name,
        type="pdf" if name.endswith(".pdf") else "markdown",
        created_at=stamp,
        modified_at=stamp,
        size_bytes=10,
    )


class MockRepo:
    """Stands in for RepoManager."""

    def __init__(self, files: dict[str, str | bytes], days: dict[str, int] | None = None):
        self.files = files
        self.days = days or {}
        self.sync_results: list[SyncResult] = []
        self.list_calls = 0
        self.read_calls = 0
        self.operating = False

    async def sync_once(self) -> SyncResult:
        return self.sync_results.pop(0)

    async def list_content_files(self, sub_path: str = "") -> list[ContentFile]:
        self.list_calls += 1
        return [
            make_file(path, self.days.get(path, 1))
            for path in self.files
            if path.startswith(sub_path)
        ]

    async def get_file_info(self, path: str) -> ContentFile:
        if path not in self.files:
            raise NotFound(path)
        return make_file(path, self.days.get(path, 1))

    async def read_file(self, path: str):
        self.read_calls += 1
        if path not in self.files:
            raise NotFound(path)
        return self.files[path]


@pytest.fixture
def cache() -> TTLCache:
    return TTLCache()


@pytest.fixture
def repo() -> MockRepo:
    return MockRepo(
        {
            "README.md": "# Home",
            "guide/install.md": "---\ntitle: Installing\n---\n![s](img/s.png)",
            "guide/untitled.md": "just prose",
            "papers/whitepaper.pdf": b"%PDF",
        },
        days={"guide/install.md": 5},
    )


@pytest.fixture
def wiki(tmp_path: Path, cache: TTLCache, repo: MockRepo) -> Wiki:
    config = WikiConfig(repo=RepoConfig(url="https://example.com/org/docs.git", cache_dir=tmp_path))
    w = Wiki(config, cache=cache)
    w.repo = repo
    return w


class TestListing:
    @pytest.mark.asyncio
    async def test_tree_and_flat(self, wiki: Wiki):
        data = await wiki.listing()
        assert data["tree"]["readme"]["path"] == "README.md"
        assert list(data["tree"]["dirs"]) == ["guide", "papers"]
        assert len(data["flat"]) == 4

    @pytest.mark.asyncio
    async def test_cached(self, wiki: Wiki, repo: MockRepo):
        await wiki.listing()
        await wiki.listing()
        assert repo.list_calls == 1

    @pytest.mark.asyncio
    async def test_search_not_cached(self, wiki: Wiki, repo: MockRepo):
        result = await wiki.search("install")
        await wiki.search("install")
        assert [f["path"] for f in result["flat"]] == ["guide/install.md"]
        assert list(result["tree"]["dirs"]) == ["guide"]
        assert repo.list_calls == 2


class TestSyncInvalidation:
    @pytest.mark.asyncio
    async def test_update_flushes_listing_and_config(self, wiki: Wiki, cache: TTLCache, repo: MockRepo):
        cache.set("posts", "", "stale")
        cache.set("config", "", "stale")
        cache.set("post", "README.md", "kept")
        repo.sync_results = [SyncResult(updated=True)]

        await wiki.sync()
        assert cache.get("posts") is None
        assert cache.get("config") is None
        assert cache.get("post", "README.md") == "kept"

    @pytest.mark.asyncio
    async def test_no_update_keeps_cache(self, wiki: Wiki, cache: TTLCache, repo: MockRepo):
        cache.set("posts", "", "fresh")
        repo.sync_results = [SyncResult(updated=False)]

        result = await wiki.sync()
        assert not result.updated
        assert cache.get("posts") == "fresh"


class TestDocument:
    @pytest.mark.asyncio
    async def test_markdown(self, wiki: Wiki):
        doc = await wiki.document("guide/install.md")
        assert doc["type"] == "markdown"
        assert doc["title"] == "Installing"
        assert "/api/image/guide/img/s.png" in doc["html"]
        assert doc["fileInfo"]["name"] == "install"

    @pytest.mark.asyncio
    async def test_title_falls_back_to_file_name(self, wiki: Wiki):
        doc = await wiki.document("guide/untitled.md")
        assert doc["title"] == "untitled"
        assert doc["description"] == "just prose"

    @pytest.mark.asyncio
    async def test_pdf_stub(self, wiki: Wiki, repo: MockRepo):
        doc = await wiki.document("/papers/whitepaper.pdf")
        assert doc["type"] == "pdf"
        assert doc["title"] == "whitepaper"
        assert doc["html"] == ""
        assert repo.read_calls == 0

    @pytest.mark.asyncio
    async def test_cached_per_path(self, wiki: Wiki, repo: MockRepo):
        await wiki.document("README.md")
        await wiki.document("README.md")
        assert repo.read_calls == 1

    @pytest.mark.asyncio
    async def test_missing(self, wiki: Wiki, cache: TTLCache):
        with pytest.raises(NotFound):
            await wiki.document("nope.md")
        assert cache.get("post", "nope.md") is None
