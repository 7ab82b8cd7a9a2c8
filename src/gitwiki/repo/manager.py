"""Repository sync manager. Owns the local working copy.

One RepoManager per tracked repository. ``sync_once`` clones on first use
(or after detecting a corrupt copy) and afterwards fetches and pulls only
when the remote branch head moved. Listings and reads never wait for a
sync; they see whatever is on disk.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from gitwiki.config import RepoConfig
from gitwiki.content.models import (
    ContentFile,
    content_type_for,
    is_content_file,
)
from gitwiki.errors import Busy, CorruptRepository, NotFound, SyncFailure
from gitwiki.repo.git import GitCommandError, run_git, stream_git
from gitwiki.repo.progress import ProgressCallback, ProgressParser

logger = logging.getLogger(__name__)

# "images" holds assets referenced from documents, never documents.
SKIPPED_DIRS = frozenset({".git", "images"})

_REPO_NAME_RE = re.compile(r"([^/:\\]+?)(?:\.git)?/*$")


@dataclass(frozen=True)
class SyncResult:
    updated: bool
    is_new: bool = False


def extract_repo_name(url: str) -> str:
    """'https://host/org/docs.git' -> 'docs'."""
    match = _REPO_NAME_RE.search(url)
    return match.group(1) if match else "repo"


class RepoManager:
    """Clone/update a remote repository and expose its content files."""

    def __init__(
        self,
        config: RepoConfig,
        *,
        progress: ProgressCallback | None = None,
        timestamp_concurrency: int = 8,
    ) -> None:
        self.url = config.url
        self.branch = config.branch
        self.cache_dir = Path(config.cache_dir)
        self.content_path = config.content_path
        self.working_copy = self.cache_dir / extract_repo_name(config.url)
        self.progress = progress
        self._timestamp_concurrency = max(1, timestamp_concurrency)
        self._operating = False

    @property
    def operating(self) -> bool:
        return self._operating

    # ── Sync ─────────────────────────────────────────────────

    async def sync_once(self) -> SyncResult:
        """Clone or update the working copy.

        Raises Busy if another sync on this instance has not finished.
        """
        if self._operating:
            raise Busy(f"Sync already in progress for {self.working_copy}")

        self._operating = True
        try:
            await asyncio.to_thread(self.cache_dir.mkdir, parents=True, exist_ok=True)

            if self.working_copy.exists():
                try:
                    local_head = await self._resolve_head()
                except CorruptRepository as e:
                    logger.warning("%s, purging and recloning", e)
                    self._report("Incomplete working copy detected, recloning")
                    await self._purge()
                else:
                    return await self._update(local_head)

            await self._clone()
            return SyncResult(updated=True, is_new=True)
        finally:
            self._operating = False

    async def _resolve_head(self) -> str:
        if not (self.working_copy / ".git").exists():
            raise CorruptRepository(f"{self.working_copy} is not a git working copy")
        try:
            return (await run_git("rev-parse", "HEAD", cwd=self.working_copy)).strip()
        except GitCommandError as e:
            raise CorruptRepository(f"Cannot resolve HEAD in {self.working_copy}") from e

    async def _update(self, local_head: str) -> SyncResult:
        try:
            await run_git("fetch", "origin", self.branch, cwd=self.working_copy)
        except GitCommandError as e:
            raise SyncFailure(f"Fetch of {self.branch} from {self.url} failed", e.stderr) from e

        try:
            remote_head = (
                await run_git("rev-parse", f"origin/{self.branch}", cwd=self.working_copy)
            ).strip()
        except GitCommandError:
            remote_head = None

        if remote_head == local_head:
            logger.debug("Working copy up to date at %s", local_head[:12])
            return SyncResult(updated=False)

        self._report("Pulling updates...")
        try:
            await run_git("pull", "--ff-only", "origin", self.branch, cwd=self.working_copy)
        except GitCommandError as e:
            raise SyncFailure(f"Pull of {self.branch} from {self.url} failed", e.stderr) from e
        self._report("Pull complete")
        logger.info("Updated %s -> %s", local_head[:12], (remote_head or "?")[:12])
        return SyncResult(updated=True)

    async def _clone(self) -> None:
        self._report("Cloning repository...")
        parser = ProgressParser()

        def on_stderr(chunk: str) -> None:
            for event in parser.feed(chunk):
                self._report(event.message, event.percent)

        try:
            await stream_git(
                "clone", "--branch", self.branch, "--progress", self.url, self.working_copy.name,
                cwd=self.cache_dir,
                on_stderr=on_stderr,
            )
        except GitCommandError as e:
            await self._purge()
            raise SyncFailure(f"Clone of {self.url} failed", e.stderr) from e

        for event in parser.close():
            self._report(event.message, event.percent)
        self._report(f"Repository cloned: {self.working_copy.name}")

    async def _purge(self) -> None:
        if self.working_copy.exists():
            await asyncio.to_thread(shutil.rmtree, self.working_copy, ignore_errors=True)

    def _report(self, message: str, percent: int | None = None) -> None:
        if self.progress is not None:
            self.progress(message, percent)
        elif percent is not None:
            logger.info("%s: %d%%", message, percent)
        else:
            logger.info("%s", message)

    # ── Content access ───────────────────────────────────────

    async def list_content_files(self, sub_path: str = "") -> list[ContentFile]:
        """All Markdown/PDF files under sub_path, newest first."""
        sub_path = sub_path.strip("/")
        search_root = self._resolve(sub_path) if sub_path else self.working_copy.resolve()
        if not search_root.is_dir():
            raise NotFound(sub_path or str(self.working_copy))

        paths = await asyncio.to_thread(self._scan, search_root)
        semaphore = asyncio.Semaphore(self._timestamp_concurrency)

        async def describe(path: Path) -> ContentFile:
            async with semaphore:
                return await self._describe(path)

        files = await asyncio.gather(*(describe(p) for p in paths))
        return sorted(files, key=lambda f: f.modified_at, reverse=True)

    async def read_file(self, path: str) -> str | bytes:
        """Markdown as text, everything else as bytes."""
        full_path = self._resolve(path)
        if not full_path.is_file():
            raise NotFound(path)
        if content_type_for(full_path.name) == "markdown":
            return await asyncio.to_thread(full_path.read_text, encoding="utf-8")
        return await asyncio.to_thread(full_path.read_bytes)

    async def get_file_info(self, path: str) -> ContentFile:
        full_path = self._resolve(path)
        if not full_path.is_file():
            raise NotFound(path)
        return await self._describe(full_path)

    def _resolve(self, path: str) -> Path:
        """Map a repository-relative path to disk, refusing escapes."""
        root = self.working_copy.resolve()
        candidate = (root / path.lstrip("/")).resolve()
        if not candidate.is_relative_to(root) or ".git" in candidate.relative_to(root).parts:
            raise NotFound(path)
        return candidate

    @staticmethod
    def _scan(search_root: Path) -> list[Path]:
        found: list[Path] = []
        for dirpath, dirnames, filenames in os.walk(search_root):
            dirnames[:] = sorted(d for d in dirnames if d not in SKIPPED_DIRS)
            for name in sorted(filenames):
                if is_content_file(name):
                    found.append(Path(dirpath) / name)
        return found

    async def _describe(self, full_path: Path) -> ContentFile:
        relative = full_path.relative_to(self.working_copy.resolve()).as_posix()
        stat = await asyncio.to_thread(full_path.stat)
        created = await self._git_created_time(relative)
        modified = await self._git_modified_time(relative)
        fs_created = getattr(stat, "st_birthtime", stat.st_ctime)
        return ContentFile(
            path=relative,
            name=full_path.name,
            type=content_type_for(full_path.name),
            created_at=created or datetime.fromtimestamp(fs_created, tz=timezone.utc),
            modified_at=modified or datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            size_bytes=stat.st_size,
        )

    async def _git_created_time(self, relative: str) -> datetime | None:
        """Author date of the commit that added the file (following renames)."""
        output = await self._git_log(
            "log", "--follow", "--diff-filter=A", "--format=%aI", "--", relative
        )
        lines = [line.strip() for line in output.splitlines() if line.strip()]
        return _parse_git_date(lines[-1]) if lines else None

    async def _git_modified_time(self, relative: str) -> datetime | None:
        output = await self._git_log("log", "-1", "--format=%aI", "--", relative)
        return _parse_git_date(output.strip()) if output.strip() else None

    async def _git_log(self, *args: str) -> str:
        try:
            return await run_git(*args, cwd=self.working_copy)
        except GitCommandError as e:
            logger.debug("No git history for %s: %s", args[-1], e)
            return ""


def _parse_git_date(value: str) -> datetime | None:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        logger.debug("Unparseable git date: %r", value)
        return None
