"""Tests for DirectoryScanner."""

from __future__ import annotations

from pathlib import Path

import pytest
from conftest import make_tree
from pydantic import ValidationError

from appsync_router import DirectoryNotFoundError, DirectoryScanner


@pytest.fixture
def resolver_tree(tmp_path: Path) -> Path:
    return make_tree(
        tmp_path / "resolvers",
        [
            "Query.getUser/1.fetch.[users].ts",
            "Query.getUser/2.format.[users].ts",
            "Query.getUser.[users].ts",
            "Mutation.updateUser.[orders].ts",
            "README.md",
            "empty/",
        ],
    )


class TestDirectoryScanner:
    """Tests for the recursive snapshot."""

    def test_lists_every_entry_depth_first(self, resolver_tree: Path):
        entries = DirectoryScanner.scan(resolver_tree)

        assert [e.relative_path for e in entries] == [
            "Mutation.updateUser.[orders].ts",
            "Query.getUser",
            "Query.getUser/1.fetch.[users].ts",
            "Query.getUser/2.format.[users].ts",
            "Query.getUser.[users].ts",
            "README.md",
            "empty",
        ]

    def test_entry_kinds_and_paths(self, resolver_tree: Path):
        entries = {e.relative_path: e for e in DirectoryScanner.scan(resolver_tree)}

        directory = entries["Query.getUser"]
        assert directory.is_directory is True
        assert directory.parent == ""

        stage = entries["Query.getUser/1.fetch.[users].ts"]
        assert stage.is_directory is False
        assert stage.is_file is True
        assert stage.name == "1.fetch.[users].ts"
        assert stage.parent == "Query.getUser"
        assert stage.path == resolver_tree.resolve() / "Query.getUser" / "1.fetch.[users].ts"

    def test_scan_is_deterministic(self, resolver_tree: Path):
        assert DirectoryScanner.scan(resolver_tree) == DirectoryScanner.scan(resolver_tree)

    def test_scan_does_not_touch_the_tree(self, resolver_tree: Path):
        before = sorted(p.relative_to(resolver_tree) for p in resolver_tree.rglob("*"))
        DirectoryScanner.scan(resolver_tree)
        after = sorted(p.relative_to(resolver_tree) for p in resolver_tree.rglob("*"))
        assert before == after

    def test_snapshot_is_immutable(self, resolver_tree: Path):
        entries = DirectoryScanner.scan(resolver_tree)
        assert isinstance(entries, tuple)
        with pytest.raises(ValidationError):
            entries[0].name = "changed"

    def test_empty_directory(self, tmp_path: Path):
        assert DirectoryScanner.scan(tmp_path) == ()

    def test_missing_root(self, tmp_path: Path):
        with pytest.raises(DirectoryNotFoundError) as exc_info:
            DirectoryScanner.scan(tmp_path / "missing")
        assert exc_info.value.metadata["path"] == str(tmp_path / "missing")

    def test_file_root_is_not_a_directory(self, tmp_path: Path):
        file_root = tmp_path / "schema.graphql"
        file_root.write_text("type Query")
        with pytest.raises(DirectoryNotFoundError):
            DirectoryScanner.scan(file_root)
