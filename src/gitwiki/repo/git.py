"""Thin async wrapper around the git CLI."""

from __future__ import annotations

import asyncio
import codecs
import logging
from collections.abc import Callable
from pathlib import Path

logger = logging.getLogger(__name__)

GIT = "git"


class GitCommandError(Exception):
    """A git command exited non-zero or could not be started."""

    def __init__(self, args: list[str], returncode: int | None, stderr: str) -> None:
        cmd = " ".join(args[:3])
        super().__init__(f"git {cmd} failed ({returncode}): {stderr.strip()[:500]}")
        self.command = args
        self.returncode = returncode
        self.stderr = stderr


async def run_git(*args: str, cwd: Path) -> str:
    """Run a git command and return its stdout."""
    logger.debug("git %s (cwd=%s)", " ".join(args), cwd)
    try:
        process = await asyncio.create_subprocess_exec(
            GIT, *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd),
        )
    except OSError as e:
        raise GitCommandError(list(args), None, str(e)) from e

    stdout, stderr = await process.communicate()
    if process.returncode != 0:
        raise GitCommandError(list(args), process.returncode, stderr.decode(errors="replace"))
    return stdout.decode(errors="replace")


async def stream_git(
    *args: str,
    cwd: Path,
    on_stderr: Callable[[str], None],
    chunk_size: int = 4096,
) -> None:
    """Run a git command, passing stderr chunks to on_stderr as they arrive.

    Raises GitCommandError with the collected stderr on failure.
    """
    logger.debug("git %s (cwd=%s, streaming)", " ".join(args), cwd)
    try:
        process = await asyncio.create_subprocess_exec(
            GIT, *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd),
        )
    except OSError as e:
        raise GitCommandError(list(args), None, str(e)) from e

    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    collected: list[str] = []
    assert process.stderr is not None
    while True:
        chunk = await process.stderr.read(chunk_size)
        if not chunk:
            break
        text = decoder.decode(chunk)
        collected.append(text)
        on_stderr(text)

    returncode = await process.wait()
    if returncode != 0:
        raise GitCommandError(list(args), returncode, "".join(collected))
