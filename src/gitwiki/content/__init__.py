"""Content model and navigation tree."""

from gitwiki.content.models import ContentFile, DirectoryNode
from gitwiki.content.tree import build_tree, filter_files

__all__ = ["ContentFile", "DirectoryNode", "build_tree", "filter_files"]
