"""Configuration loading from environment variables and gitwiki.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_DEFAULT_CACHE_DIR = Path.home() / ".gitwiki" / "repos"
_CONFIG_FILENAME = "gitwiki.toml"


@dataclass
class RepoConfig:
    """Remote repository and local working copy location."""

    url: str = ""
    branch: str = "main"
    cache_dir: Path = _DEFAULT_CACHE_DIR
    content_path: str = ""


@dataclass
class SyncConfig:
    """Periodic sync settings."""

    interval: int = 180
    timestamp_concurrency: int = 8


@dataclass
class WikiConfig:
    """Top-level gitwiki configuration."""

    repo: RepoConfig = field(default_factory=RepoConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    asset_prefix: str = "/api/image/"
    log_level: str = "INFO"


def load_config(config_path: Path | None = None) -> WikiConfig:
    """Load configuration from environment variables and optional gitwiki.toml.

    Priority: environment variables > gitwiki.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        for candidate in [Path.cwd() / _CONFIG_FILENAME, Path.home() / ".gitwiki" / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    repo_data = file_data.get("repo", {})
    sync_data = file_data.get("sync", {})

    cache_dir = os.getenv("GITWIKI_CACHE_DIR", repo_data.get("cache_dir", str(_DEFAULT_CACHE_DIR)))

    config = WikiConfig(
        repo=RepoConfig(
            url=os.getenv("GITWIKI_REPO_URL", repo_data.get("url", "")),
            branch=os.getenv("GITWIKI_BRANCH", repo_data.get("branch", "main")),
            cache_dir=Path(cache_dir).expanduser(),
            content_path=os.getenv("GITWIKI_CONTENT_PATH", repo_data.get("content_path", "")),
        ),
        sync=SyncConfig(
            interval=int(os.getenv("GITWIKI_SYNC_INTERVAL", sync_data.get("interval", 180))),
            timestamp_concurrency=int(sync_data.get("timestamp_concurrency", 8)),
        ),
        asset_prefix=file_data.get("asset_prefix", "/api/image/"),
        log_level=os.getenv("GITWIKI_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
    return config
