"""Tests for resource naming and ResolverAssembler."""

from __future__ import annotations

from pathlib import Path

import pytest

from appsync_router import (
    DEFAULT_PIPELINE_RESOLVER_CODE,
    BundlingOptions,
    CodeAsset,
    EventBridge,
    EventNames,
    FieldKey,
    InlineCode,
    InMemoryResourceGraph,
    ResolverAssembler,
    ResolverKind,
    get_function_name,
    get_resolver_name,
)

GET_USER = FieldKey(type_name="Query", field_name="getUser")


@pytest.fixture
def assembler(bundler, resource_graph: InMemoryResourceGraph, event_bridge: EventBridge):
    return ResolverAssembler(
        bundler, resource_graph, event_bridge, BundlingOptions(exclude_source_map=True)
    )


class TestNaming:
    """Tests for resource ids."""

    @pytest.mark.parametrize(
        "type_name, field_name, expected",
        [
            ("Query", "getUser", "QueryGetUserResolver"),
            ("Mutation", "addPost", "MutationAddPostResolver"),
            ("Query", "x", "QueryXResolver"),
        ],
    )
    def test_resolver_name(self, type_name: str, field_name: str, expected: str):
        assert get_resolver_name(type_name, field_name) == expected

    def test_separators_in_names_give_distinct_resolver_names(self):
        assert get_resolver_name("A_b", "c") != get_resolver_name("A", "b_c")

    def test_function_name_includes_data_source(self):
        """Test function names stay unique across data sources."""
        assert get_function_name(GET_USER, "users", "fetch") == "Query_getUser_users_fetch"
        assert get_function_name(GET_USER, "orders", "fetch") == "Query_getUser_orders_fetch"


class TestResolverAssembler:
    """Tests for resource creation through the assembler."""

    def test_bundle_uses_router_options(self, assembler: ResolverAssembler, bundler, tmp_path):
        entry = tmp_path / "Query.getUser.[users].ts"
        entry.write_text("export {}\n")

        assembler.bundle(entry)
        assembler.bundle(entry, BundlingOptions())

        assert [options for _, options in bundler.calls] == [
            BundlingOptions(exclude_source_map=True),
            BundlingOptions(),
        ]

    def test_default_pipeline_resolver(
        self, assembler: ResolverAssembler, resource_graph: InMemoryResourceGraph
    ):
        resolver = assembler.pipeline_resolver(GET_USER)

        assert resolver.resolver_id == "QueryGetUserResolver"
        assert resolver.kind == ResolverKind.PIPELINE
        assert resolver.data_source is None
        assert resolver.code == InlineCode(source=DEFAULT_PIPELINE_RESOLVER_CODE)
        assert "ctx.prev.result" in DEFAULT_PIPELINE_RESOLVER_CODE
        assert resource_graph.get_resolver("QueryGetUserResolver") is resolver

    def test_wrapped_pipeline_resolver(self, assembler: ResolverAssembler):
        code = CodeAsset(asset_hash="abc", entry_file=Path("resolver.ts"))

        resolver = assembler.pipeline_resolver(GET_USER, code)

        assert resolver.resolver_id == "QueryGetUserResolver"
        assert resolver.code == code

    def test_update_pipeline_publishes(
        self,
        assembler: ResolverAssembler,
        resource_graph: InMemoryResourceGraph,
        event_bridge: EventBridge,
    ):
        resource_graph.add_data_source("users")
        updates = []
        event_bridge.subscribe(EventNames.PIPELINE_UPDATED, lambda r, ids: updates.append(ids))
        code = InlineCode(source="export {}")
        resolver = assembler.pipeline_resolver(GET_USER)
        assembler.function("Query_getUser_users_fetch", "users", code)

        assembler.update_pipeline(resolver.resolver_id, ["Query_getUser_users_fetch"])

        assert updates == [["Query_getUser_users_fetch"]]
        assert resolver.pipeline_functions == ["Query_getUser_users_fetch"]
