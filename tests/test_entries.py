"""Tests for explicit entry file resolution.

These tests verify:
- entry_file / entry_dir exclusivity
- Extension checks happen before existence checks
- .ts is preferred over .js
- Not-found errors name every attempted path
"""

from __future__ import annotations

from pathlib import Path

import pytest
from conftest import make_tree

from appsync_router import (
    ConflictingOptionsError,
    DirectoryNotFoundError,
    EntryFileNotFoundError,
    FieldKey,
    InvalidExtensionError,
)
from appsync_router.entries import find_function_entry, find_resolver_entries, find_resolver_entry


class TestFindResolverEntry:
    """Tests for find_resolver_entry."""

    def test_explicit_file(self, tmp_path: Path):
        make_tree(tmp_path, ["custom/handler.js"])
        handler = tmp_path / "custom" / "handler.js"
        assert find_resolver_entry("Query", "getUser", entry_file=handler) == handler

    def test_invalid_extension_checked_before_existence(self, tmp_path: Path):
        with pytest.raises(InvalidExtensionError):
            find_resolver_entry("Query", "getUser", entry_file=tmp_path / "missing.py")

    def test_explicit_file_missing(self, tmp_path: Path):
        missing = tmp_path / "missing.ts"
        with pytest.raises(EntryFileNotFoundError) as exc_info:
            find_resolver_entry("Query", "getUser", entry_file=missing)
        assert exc_info.value.attempted == [str(missing)]

    def test_conflicting_options(self, tmp_path: Path):
        with pytest.raises(ConflictingOptionsError):
            find_resolver_entry(
                "Query", "getUser", entry_file=tmp_path / "a.py", entry_dir=tmp_path
            )

    def test_typescript_preferred(self, tmp_path: Path):
        make_tree(tmp_path, ["Query.getUser.ts", "Query.getUser.js"])
        entry = find_resolver_entry("Query", "getUser", entry_dir=tmp_path)
        assert entry.name == "Query.getUser.ts"

    def test_javascript_fallback(self, tmp_path: Path):
        make_tree(tmp_path, ["Query.getUser.js"])
        entry = find_resolver_entry("Query", "getUser", entry_dir=tmp_path)
        assert entry.name == "Query.getUser.js"

    def test_not_found_names_both_paths(self, tmp_path: Path):
        with pytest.raises(EntryFileNotFoundError) as exc_info:
            find_resolver_entry("Query", "getUser", entry_dir=tmp_path)

        ts_file = str(tmp_path / "Query.getUser.ts")
        js_file = str(tmp_path / "Query.getUser.js")
        assert exc_info.value.attempted == [ts_file, js_file]
        assert ts_file in str(exc_info.value)
        assert js_file in str(exc_info.value)

    def test_requires_a_location(self):
        with pytest.raises(ValueError):
            find_resolver_entry("Query", "getUser")


class TestFindFunctionEntry:
    """Tests for find_function_entry."""

    def test_name_without_extension(self, tmp_path: Path):
        make_tree(tmp_path, ["fetchUser.js"])
        assert find_function_entry("fetchUser", entry_dir=tmp_path) == tmp_path / "fetchUser.js"

    def test_name_with_extension(self, tmp_path: Path):
        make_tree(tmp_path, ["fetchUser.ts"])
        assert find_function_entry("fetchUser.ts", entry_dir=tmp_path) == tmp_path / "fetchUser.ts"

    def test_name_with_foreign_extension(self, tmp_path: Path):
        with pytest.raises(InvalidExtensionError):
            find_function_entry("fetchUser.py", entry_dir=tmp_path)

    def test_name_with_extension_missing(self, tmp_path: Path):
        with pytest.raises(EntryFileNotFoundError):
            find_function_entry("fetchUser.ts", entry_dir=tmp_path)

    def test_explicit_file_invalid_extension(self, tmp_path: Path):
        with pytest.raises(InvalidExtensionError):
            find_function_entry("fetchUser", entry_file=tmp_path / "fetch.rb")

    def test_conflicting_options(self, tmp_path: Path):
        with pytest.raises(ConflictingOptionsError):
            find_function_entry("fetchUser", entry_file="fetch.ts", entry_dir=tmp_path)


class TestFindResolverEntries:
    """Tests for bulk listing."""

    def test_lists_flat_files(self, tmp_path: Path):
        make_tree(
            tmp_path,
            [
                "Query.listPosts.ts",
                "Mutation.addPost.js",
                "Query.getUser.[users].ts",
                "README.md",
                "Query.sub/",
            ],
        )

        descriptors = find_resolver_entries(tmp_path)

        assert [d.field_key for d in descriptors] == [
            FieldKey(type_name="Mutation", field_name="addPost"),
            FieldKey(type_name="Query", field_name="listPosts"),
        ]

    def test_missing_directory(self, tmp_path: Path):
        with pytest.raises(DirectoryNotFoundError):
            find_resolver_entries(tmp_path / "missing")
