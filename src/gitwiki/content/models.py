"""ContentFile and DirectoryNode."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

MARKDOWN_EXTENSIONS = (".md", ".markdown")
PDF_EXTENSIONS = (".pdf",)
CONTENT_EXTENSIONS = MARKDOWN_EXTENSIONS + PDF_EXTENSIONS

_CONTENT_EXT_RE = re.compile(r"\.(md|markdown|pdf)$", re.IGNORECASE)

ContentType = Literal["markdown", "pdf"]


def is_content_file(name: str) -> bool:
    return name.lower().endswith(CONTENT_EXTENSIONS)


def content_type_for(name: str) -> ContentType:
    return "pdf" if name.lower().endswith(PDF_EXTENSIONS) else "markdown"


def strip_content_extension(name: str) -> str:
    return _CONTENT_EXT_RE.sub("", name)


@dataclass(frozen=True)
class ContentFile:
    """A Markdown or PDF document in the working copy."""

    path: str  # POSIX, relative to the working copy root
    name: str
    type: ContentType
    created_at: datetime
    modified_at: datetime
    size_bytes: int

    @property
    def display_name(self) -> str:
        return strip_content_extension(self.name)

    def to_dict(self) -> dict:
        return {
            "name": self.display_name,
            "fullName": self.name,
            "path": self.path,
            "type": self.type,
            "created": self.created_at.isoformat(),
            "modified": self.modified_at.isoformat(),
            "size": self.size_bytes,
        }


@dataclass(frozen=True)
class DirectoryNode:
    """One level of the navigation tree. Built by content.tree.build_tree."""

    files: tuple[ContentFile, ...] = ()
    dirs: dict[str, DirectoryNode] = field(default_factory=dict)
    readme: ContentFile | None = None
    about: ContentFile | None = None

    def iter_files(self):
        """Yield every file in the subtree, readme/about included."""
        for special in (self.readme, self.about):
            if special is not None:
                yield special
        yield from self.files
        for child in self.dirs.values():
            yield from child.iter_files()

    def to_dict(self) -> dict:
        data: dict = {}
        if self.files:
            data["files"] = [f.to_dict() for f in self.files]
        if self.dirs:
            data["dirs"] = {name: child.to_dict() for name, child in self.dirs.items()}
        if self.readme is not None:
            data["readme"] = self.readme.to_dict()
        if self.about is not None:
            data["about"] = self.about.to_dict()
        return data
