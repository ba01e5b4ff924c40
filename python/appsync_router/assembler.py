"""Turns descriptors into resolver and function resources.

The assembler owns resource naming and delegates code resolution to the
Bundler and resource creation to the ResourceGraph. Every resource it
creates or updates is published on the EventBridge.
"""

from __future__ import annotations

from pathlib import Path

from .bundler import BaseBundler, Code, CodeAsset, InlineCode
from .event_bridge import EventBridge, EventNames
from .logging import log_debug, log_info
from .resource_graph import BaseResourceGraph, FunctionResource, ResolverResource
from .types import BundlingOptions, FieldKey, ResolverKind

DEFAULT_PIPELINE_RESOLVER_CODE = """
export function request(ctx) { return {} }
export function response(ctx) { return ctx.prev.result }
""".strip()


def get_resolver_name(type_name: str, field_name: str) -> str:
    """Resource id of a resolver: ``Query`` + ``getUser`` -> ``QueryGetUserResolver``."""
    return f"{type_name}{field_name[:1].upper()}{field_name[1:]}Resolver"


def get_function_name(field_key: FieldKey, data_source_name: str, stage_name: str) -> str:
    """Globally unique function id: ``Type_field_dataSource_stage``."""
    return f"{field_key.type_name}_{field_key.field_name}_{data_source_name}_{stage_name}"


class ResolverAssembler:
    """Bridge between discovered descriptors and the external collaborators.

    Example:
        >>> assembler = ResolverAssembler(bundler, graph, EventBridge.instance())
        >>> code = assembler.bundle(Path("resolvers/Query.getUser.[users].ts"))
        >>> key = FieldKey(type_name="Query", field_name="getUser")
        >>> assembler.unit_resolver("users", key, code)
    """

    def __init__(
        self,
        bundler: BaseBundler,
        resource_graph: BaseResourceGraph,
        event_bridge: EventBridge,
        bundling: BundlingOptions | None = None,
    ) -> None:
        self._bundler = bundler
        self._graph = resource_graph
        self._bridge = event_bridge
        self._bundling = bundling or BundlingOptions()

    @property
    def resource_graph(self) -> BaseResourceGraph:
        return self._graph

    def bundle(self, entry_file: Path, bundling: BundlingOptions | None = None) -> CodeAsset:
        """Bundle ``entry_file``; falls back to the router-wide bundling options."""
        return self._bundler.bundle(entry_file, bundling or self._bundling)

    def unit_resolver(self, data_source: str, field_key: FieldKey, code: Code) -> ResolverResource:
        resolver = self._graph.create_resolver(
            ResolverResource(
                resolver_id=get_resolver_name(field_key.type_name, field_key.field_name),
                type_name=field_key.type_name,
                field_name=field_key.field_name,
                data_source=data_source,
                kind=ResolverKind.UNIT,
                code=code,
            )
        )
        log_info(f"Created unit resolver {resolver.resolver_id}", {"data_source": data_source})
        self._bridge.publish(EventNames.RESOLVER_CREATED, resolver)
        return resolver

    def pipeline_resolver(self, field_key: FieldKey, code: Code | None = None) -> ResolverResource:
        """Create the pipeline resolver of ``field_key``.

        Without ``code`` a pass-through wrapper is generated: its request is
        empty and its response is the previous stage's result.
        """
        if code is None:
            code = InlineCode(source=DEFAULT_PIPELINE_RESOLVER_CODE)

        resolver = self._graph.create_resolver(
            ResolverResource(
                resolver_id=get_resolver_name(field_key.type_name, field_key.field_name),
                type_name=field_key.type_name,
                field_name=field_key.field_name,
                kind=ResolverKind.PIPELINE,
                code=code,
            )
        )
        log_info(f"Created pipeline resolver {resolver.resolver_id}")
        self._bridge.publish(EventNames.RESOLVER_CREATED, resolver)
        return resolver

    def function(self, name: str, data_source: str, code: Code) -> FunctionResource:
        function = self._graph.create_function(
            FunctionResource(name=name, data_source=data_source, code=code)
        )
        log_debug(f"Created function {function.name}", {"data_source": data_source})
        self._bridge.publish(EventNames.FUNCTION_CREATED, function)
        return function

    def update_pipeline(self, resolver_id: str, function_ids: list[str]) -> ResolverResource:
        """Rewrite a pipeline resolver's function list."""
        resolver = self._graph.update_pipeline_config(resolver_id, function_ids)
        log_debug(f"Updated pipeline {resolver_id}", {"functions": ",".join(function_ids)})
        self._bridge.publish(EventNames.PIPELINE_UPDATED, resolver, list(function_ids))
        return resolver


__all__ = [
    "DEFAULT_PIPELINE_RESOLVER_CODE",
    "ResolverAssembler",
    "get_function_name",
    "get_resolver_name",
]
