"""Rewrite local image references to the asset-serving route."""

from __future__ import annotations

import posixpath
import re

from gitwiki.render.fences import split_fenced

DEFAULT_ASSET_PREFIX = "/api/image/"

_IMAGE_RE = re.compile(
    r"!\[(?P<alt>[^\]]*)\]\((?P<target>[^)\s]+)(?P<title>\s+(?:\"[^\"]*\"|'[^']*'))?\s*\)"
)
# http:, https:, data:, mailto: ... and protocol-relative //host
_ABSOLUTE_RE = re.compile(r"^(?:[a-zA-Z][a-zA-Z0-9+.-]*:|//)")


def is_absolute_url(target: str) -> bool:
    return bool(_ABSOLUTE_RE.match(target))


def resolve_asset_path(target: str, document_path: str) -> str:
    """Resolve target against the document's directory.

    A leading "/" means the repository root. ".." never climbs above it.
    """
    if target.startswith("/"):
        parts: list[str] = []
    else:
        parts = [p for p in posixpath.dirname(document_path).split("/") if p]

    for segment in target.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if parts:
                parts.pop()
            continue
        parts.append(segment)
    return "/".join(parts)


def rewrite_asset_paths(
    markdown_text: str,
    document_path: str,
    asset_prefix: str = DEFAULT_ASSET_PREFIX,
) -> str:
    """Point local image references at asset_prefix. Code samples are left alone."""

    def replace(match: re.Match) -> str:
        target = match.group("target")
        if is_absolute_url(target):
            return match.group(0)
        resolved = resolve_asset_path(target, document_path)
        title = match.group("title") or ""
        return f"![{match.group('alt')}]({asset_prefix}{resolved}{title})"

    return "".join(
        chunk if is_code else _IMAGE_RE.sub(replace, chunk)
        for chunk, is_code in split_fenced(markdown_text)
    )
