"""Tests for the navigation tree builder."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from gitwiki.content import ContentFile, DirectoryNode, build_tree, filter_files
from gitwiki.content.models import content_type_for

BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_file(path: str, day: int) -> ContentFile:
    name = path.rsplit("/", 1)[-1]
    stamp = BASE + timedelta(days=day)
    return ContentFile(
        path=path,
        name=name,
        type=content_type_for(name),
        created_at=stamp,
        modified_at=stamp,
        size_bytes=100,
    )


def node_at(tree: DirectoryNode, *names: str) -> DirectoryNode:
    node = tree
    for name in names:
        node = node.dirs[name]
    return node


class TestPlacement:
    def test_root_files(self):
        tree = build_tree([make_file("a.md", 1), make_file("b.pdf", 2)])
        assert [f.path for f in tree.files] == ["b.pdf", "a.md"]
        assert tree.dirs == {}

    def test_nested_chain(self):
        f = make_file("guide/setup/install.md", 1)
        tree = build_tree([f])
        assert node_at(tree, "guide", "setup").files == (f,)
        assert node_at(tree, "guide").files == ()

    def test_every_file_placed_exactly_once(self):
        files = [
            make_file("a.md", 1),
            make_file("x/b.md", 2),
            make_file("x/y/c.md", 3),
            make_file("x/y/README.md", 4),
            make_file("z/about.md", 5),
            make_file("z/d.pdf", 6),
        ]
        tree = build_tree(files)
        placed = list(tree.iter_files())
        assert sorted(f.path for f in placed) == sorted(f.path for f in files)

    def test_file_lands_under_its_own_directory(self):
        files = [make_file("x/y/c.md", 3), make_file("x/b.md", 2)]
        tree = build_tree(files)
        for f in files:
            *dirs, _ = f.path.split("/")
            assert f in node_at(tree, *dirs).files

    def test_input_untouched(self):
        files = [make_file("b.md", 1), make_file("a.md", 2)]
        snapshot = list(files)
        build_tree(files)
        assert files == snapshot


class TestReadmeAbout:
    def test_readme_attached(self):
        readme = make_file("docs/README.md", 1)
        other = make_file("docs/page.md", 2)
        tree = build_tree([readme, other])
        docs = node_at(tree, "docs")
        assert docs.readme == readme
        assert readme not in docs.files
        assert docs.files == (other,)

    def test_case_insensitive(self):
        tree = build_tree([make_file("Readme.markdown", 1), make_file("ABOUT.md", 2)])
        assert tree.readme.name == "Readme.markdown"
        assert tree.about.name == "ABOUT.md"
        assert tree.files == ()

    def test_about_attached_in_subdir(self):
        about = make_file("team/about.md", 3)
        tree = build_tree([about])
        assert node_at(tree, "team").about == about

    def test_readme_like_names_stay_files(self):
        tree = build_tree([make_file("readme-old.md", 1), make_file("about-us.md", 2)])
        assert tree.readme is None
        assert tree.about is None
        assert len(tree.files) == 2


class TestOrdering:
    def test_files_newest_first(self):
        tree = build_tree([make_file("d/a.md", 1), make_file("d/b.md", 3), make_file("d/c.md", 2)])
        assert [f.name for f in node_at(tree, "d").files] == ["b.md", "c.md", "a.md"]

    def test_dirs_sorted_by_propagated_time(self):
        files = [
            make_file("old/a.md", 1),
            make_file("new/b.md", 2),
            make_file("deep/x/y/c.md", 9),
        ]
        tree = build_tree(files)
        assert list(tree.dirs) == ["deep", "new", "old"]

    def test_propagated_time_is_max_of_files_and_children(self):
        files = [
            make_file("p/own.md", 5),
            make_file("p/child/late.md", 7),
            make_file("q/own.md", 6),
        ]
        tree = build_tree(files)
        # p's newest entry is in its child (day 7), beating q (day 6)
        assert list(tree.dirs) == ["p", "q"]

    def test_readme_only_directory_sorts_last(self):
        files = [make_file("intro/README.md", 10), make_file("notes/a.md", 1)]
        tree = build_tree(files)
        assert list(tree.dirs) == ["notes", "intro"]

    def test_ties_keep_first_seen_order(self):
        files = [make_file("beta/a.md", 1), make_file("alpha/b.md", 1)]
        tree = build_tree(files)
        assert list(tree.dirs) == ["beta", "alpha"]


class TestSerialization:
    def test_to_dict_shape(self):
        tree = build_tree([make_file("docs/README.md", 1), make_file("docs/page.md", 2)])
        data = tree.to_dict()
        docs = data["dirs"]["docs"]
        assert docs["readme"]["name"] == "README"
        assert docs["readme"]["fullName"] == "README.md"
        assert docs["files"][0]["name"] == "page"
        assert docs["files"][0]["modified"].startswith("2024-01-03")

    def test_no_aggregate_in_output(self):
        tree = build_tree([make_file("a/b.md", 1)])
        assert "_maxModified" not in str(tree.to_dict())
        assert not hasattr(node_at(tree, "a"), "latest")


class TestFilter:
    FILES = [
        make_file("guide/Install.md", 1),
        make_file("guide/usage.md", 2),
        make_file("api/reference.pdf", 3),
    ]

    def test_matches_name_case_insensitive(self):
        assert [f.path for f in filter_files(self.FILES, "install")] == ["guide/Install.md"]

    def test_matches_path(self):
        assert len(filter_files(self.FILES, "guide/")) == 2

    def test_empty_keyword_keeps_all(self):
        assert filter_files(self.FILES, "  ") == self.FILES

    def test_filtered_tree_uses_same_rules(self):
        tree = build_tree(filter_files(self.FILES, "guide"))
        assert list(tree.dirs) == ["guide"]
        assert [f.name for f in node_at(tree, "guide").files] == ["usage.md", "Install.md"]
