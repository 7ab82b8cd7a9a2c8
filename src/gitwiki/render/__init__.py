"""Markdown rendering pipeline."""

from gitwiki.render.assets import rewrite_asset_paths
from gitwiki.render.front_matter import split_frontmatter
from gitwiki.render.parser import (
    ParsedDocument,
    extract_description,
    extract_title,
    parse,
    render_html,
)

__all__ = [
    "ParsedDocument",
    "extract_description",
    "extract_title",
    "parse",
    "render_html",
    "rewrite_asset_paths",
    "split_frontmatter",
]
