"""Build the navigation tree from a flat file listing.

The tree is rebuilt on every call. A mutable ``_Builder`` collects files and
the propagated "latest modified" time; ``_freeze`` then emits immutable
``DirectoryNode``s without that aggregate.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from gitwiki.content.models import ContentFile, DirectoryNode

_README = "readme"
_ABOUT = "about"


class _Builder:
    __slots__ = ("files", "dirs", "readme", "about", "latest")

    def __init__(self) -> None:
        self.files: list[ContentFile] = []
        self.dirs: dict[str, _Builder] = {}
        self.readme: ContentFile | None = None
        self.about: ContentFile | None = None
        self.latest: datetime | None = None

    def place(self, file: ContentFile) -> None:
        *parents, _ = file.path.split("/")
        node = self
        for part in parents:
            if not part:
                continue
            node = node.dirs.setdefault(part, _Builder())

        key = file.display_name.lower()
        if key == _README:
            node.readme = file
        elif key == _ABOUT:
            node.about = file
        else:
            node.files.append(file)

    def settle(self) -> datetime | None:
        """Sort bottom-up and return this node's propagated modified time."""
        self.files.sort(key=lambda f: f.modified_at, reverse=True)

        times = [f.modified_at for f in self.files]
        for child in self.dirs.values():
            child_latest = child.settle()
            if child_latest is not None:
                times.append(child_latest)
        self.latest = max(times) if times else None

        # Undated directories last; sorted() keeps first-seen order on ties.
        ordered = sorted(
            self.dirs.items(),
            key=lambda item: (item[1].latest is not None, item[1].latest or datetime.min),
            reverse=True,
        )
        self.dirs = dict(ordered)
        return self.latest


def _freeze(node: _Builder) -> DirectoryNode:
    return DirectoryNode(
        files=tuple(node.files),
        dirs={name: _freeze(child) for name, child in node.dirs.items()},
        readme=node.readme,
        about=node.about,
    )


def build_tree(files: Iterable[ContentFile]) -> DirectoryNode:
    """Turn a flat file list into a sorted, README-aware DirectoryNode tree."""
    root = _Builder()
    for file in files:
        root.place(file)
    root.settle()
    return _freeze(root)


def filter_files(files: Iterable[ContentFile], keyword: str) -> list[ContentFile]:
    """Case-insensitive match on display name, file name and path."""
    needle = keyword.strip().lower()
    if not needle:
        return list(files)
    return [
        f for f in files
        if needle in f"{f.display_name} {f.name} {f.path}".lower()
    ]
