"""Frontmatter extraction.

Documents in content repositories are hand-written, so the block is read as
flat ``key: value`` lines rather than full YAML: values stay strings, and a
value wrapped in ``[...]`` becomes a list. Anything that does not look like a
closed ``---`` block is treated as having no frontmatter.
"""

from __future__ import annotations

import frontmatter
from frontmatter.default_handlers import YAMLHandler


def parse_simple_block(text: str) -> dict:
    """Parse ``key: value`` lines. Lines without a key are ignored."""
    metadata: dict = {}
    for line in text.splitlines():
        key, sep, value = line.partition(":")
        key = key.strip()
        if not sep or not key:
            continue
        value = value.strip()
        if value.startswith("[") and value.endswith("]"):
            metadata[key] = [v.strip() for v in value[1:-1].split(",") if v.strip()]
        else:
            metadata[key] = value
    return metadata


class SimpleHandler(YAMLHandler):
    """``---`` delimited block parsed with parse_simple_block."""

    def load(self, fm: str, **kwargs) -> dict:
        return parse_simple_block(fm)


_HANDLER = SimpleHandler()


def split_frontmatter(text: str) -> tuple[dict, str]:
    """Return (frontmatter, body)."""
    text = text.lstrip("\ufeff")
    if not _HANDLER.detect(text):
        return {}, text
    metadata, body = frontmatter.parse(text, handler=_HANDLER)
    return metadata, body
