"""Entry point: python -m gitwiki [sync|tree|search KEYWORD|render PATH|serve]

- "sync":    Clone or update the working copy once
- "tree":    Print the navigation tree as JSON
- "search":  Print the tree filtered by KEYWORD
- "render":  Print one rendered document as JSON
- "serve":   Daemon mode, periodic sync
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys

from gitwiki.config import WikiConfig, load_config
from gitwiki.errors import GitwikiError

USAGE = """\
Usage: python -m gitwiki [sync|tree|search KEYWORD|render PATH|serve]
  sync     Clone or update the working copy once
  tree     Print the navigation tree as JSON
  search   Print the navigation tree filtered by KEYWORD
  render   Print the rendered document at PATH as JSON
  serve    Daemon mode with periodic sync"""


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _load() -> WikiConfig:
    config = load_config()
    _setup_logging(config.log_level)
    if not config.repo.url:
        print("Configuration error: repo.url (or GITWIKI_REPO_URL) is required", file=sys.stderr)
        sys.exit(1)
    return config


def _print_progress(message: str, percent: int | None) -> None:
    if percent is None:
        print(message, file=sys.stderr)
    else:
        filled = round(percent / 100 * 30)
        bar = "█" * filled + "░" * (30 - filled)
        end = "\n" if percent >= 100 else ""
        print(f"\r{message} [{bar}] {percent}%", end=end, file=sys.stderr, flush=True)


async def _run_once(command: str, argument: str | None) -> object:
    from gitwiki.core import Wiki

    wiki = Wiki(_load(), progress=_print_progress)
    if command == "sync":
        result = await wiki.sync()
        return {"updated": result.updated, "isNew": result.is_new}
    if command == "tree":
        return await wiki.listing()
    if command == "search":
        return await wiki.search(argument or "")
    return await wiki.document(argument or "")


def _run_serve() -> None:
    """Daemon mode: initial sync + scheduler."""
    config = _load()

    from gitwiki.daemon import WikiDaemon

    daemon = WikiDaemon(config)
    asyncio.run(daemon.run())


def main() -> None:
    cmd = sys.argv[1] if len(sys.argv) > 1 else ""
    argument = sys.argv[2] if len(sys.argv) > 2 else None

    if cmd == "serve":
        _run_serve()
    elif cmd in ("sync", "tree") or (cmd in ("search", "render") and argument):
        try:
            output = asyncio.run(_run_once(cmd, argument))
        except GitwikiError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        print(json.dumps(output, ensure_ascii=False, indent=2))
    else:
        print(USAGE)
        sys.exit(1)


if __name__ == "__main__":
    main()
