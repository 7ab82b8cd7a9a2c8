"""Markdown document -> ParsedDocument.

parse() is a pure transform: frontmatter split, local image rewriting,
HTML rendering, then title/description/keywords/tags resolution with
fallbacks taken from the body.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass, field

import markdown

from gitwiki.render.assets import DEFAULT_ASSET_PREFIX, rewrite_asset_paths
from gitwiki.render.fences import prose_lines
from gitwiki.render.front_matter import split_frontmatter

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"
DESCRIPTION_LIMIT = 150

# codehilite tries the declared language, then guess_lexer, then plain text.
_EXTENSIONS = ["fenced_code", "codehilite", "tables", "sane_lists", "nl2br"]
_EXTENSION_CONFIGS = {
    "codehilite": {"guess_lang": True, "css_class": "highlight"},
}


@dataclass
class ParsedDocument:
    frontmatter: dict = field(default_factory=dict)
    html: str = ""
    title: str = UNTITLED
    description: str = ""
    keywords: str | list[str] = ""
    tags: list[str] = field(default_factory=list)
    raw_body: str = ""

    def to_dict(self) -> dict:
        return {
            "frontmatter": self.frontmatter,
            "html": self.html,
            "title": self.title,
            "description": self.description,
            "keywords": self.keywords,
            "tags": self.tags,
            "raw": self.raw_body,
        }


def render_html(body: str) -> str:
    """Markdown -> HTML. Falls back to escaped text instead of raising."""
    try:
        return markdown.markdown(
            body, extensions=_EXTENSIONS, extension_configs=_EXTENSION_CONFIGS
        )
    except Exception:
        logger.exception("Markdown rendering failed, serving escaped source")
        return f"<pre>{html.escape(body)}</pre>"


def extract_title(body: str) -> str:
    for line in prose_lines(body):
        if line.startswith("# "):
            return line[2:].strip()
    return UNTITLED


def extract_description(body: str) -> str:
    """First prose line outside code blocks, cut at DESCRIPTION_LIMIT characters."""
    for line in prose_lines(body):
        text = line.strip()
        if not text or text.startswith(("#", "```", "~~~", "![")):
            continue
        if len(text) > DESCRIPTION_LIMIT:
            return text[:DESCRIPTION_LIMIT] + "..."
        return text
    return ""


def _tags(value) -> list[str]:
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        return [t.strip() for t in value.split(",") if t.strip()]
    return []


def parse(
    raw_text: str,
    document_path: str = "",
    *,
    asset_prefix: str = DEFAULT_ASSET_PREFIX,
) -> ParsedDocument:
    """Parse a Markdown document located at document_path in the repository."""
    meta, body = split_frontmatter(raw_text)

    processed = body
    if document_path:
        processed = rewrite_asset_paths(body, document_path, asset_prefix)

    return ParsedDocument(
        frontmatter=meta,
        html=render_html(processed),
        title=meta.get("title") or extract_title(body),
        description=meta.get("description") or extract_description(body),
        keywords=meta.get("keywords") or "",
        tags=_tags(meta.get("tags")),
        raw_body=body,
    )
