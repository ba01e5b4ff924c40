"""Declarative resource graph for the GraphQL API.

The resource graph records the API, its data sources, resolvers and
pipeline functions. Resources are declarative definitions, not runtime
objects: they are created once and may be updated in place (a pipeline
resolver's function list grows as data sources are registered).

Example:
    >>> graph = InMemoryResourceGraph()
    >>> graph.create_api("blog", name="blog", schema_file=Path("blog/schema.graphql"))
    >>> graph.add_data_source("users", DataSourceKind.DYNAMODB, {"table_name": "users"})
    >>> graph.synth()["data_sources"]["users"]["kind"]
    'AMAZON_DYNAMODB'
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from .bundler import Code, CodeAsset, InlineCode
from .exceptions import DuplicateDataSourceError, DuplicateResourceError, UnknownDataSourceError
from .logging import log_debug
from .types import DataSourceKind, ResolverKind

JS_RUNTIME = "APPSYNC_JS 1.0.0"


class GraphqlApiResource(BaseModel):
    api_id: str
    name: str
    schema_file: Path
    xray_enabled: bool = False
    visibility: str = "GLOBAL"
    introspection: str = "ENABLED"
    authorization_config: dict[str, Any] | None = None
    log_config: dict[str, Any] | None = None
    domain_name: dict[str, Any] | None = None


class DataSourceResource(BaseModel):
    """A named backend integration."""

    name: str
    kind: DataSourceKind = DataSourceKind.NONE
    properties: dict[str, Any] = Field(default_factory=dict)


class ResolverResource(BaseModel):
    """A unit or pipeline resolver attached to a schema field."""

    resolver_id: str
    type_name: str
    field_name: str
    data_source: str | None = None
    kind: ResolverKind = ResolverKind.UNIT
    runtime: str = JS_RUNTIME
    code: Code
    pipeline_functions: list[str] = Field(default_factory=list)


class FunctionResource(BaseModel):
    """A pipeline function bound to one data source."""

    name: str
    data_source: str
    runtime: str = JS_RUNTIME
    code: Code

    @property
    def function_id(self) -> str:
        return self.name


class BaseResourceGraph(ABC):
    """Contract of the resource graph collaborator."""

    @abstractmethod
    def create_api(self, api_id: str, **properties: Any) -> GraphqlApiResource: ...

    @abstractmethod
    def add_data_source(
        self,
        name: str,
        kind: DataSourceKind = DataSourceKind.NONE,
        properties: dict[str, Any] | None = None,
    ) -> DataSourceResource: ...

    @abstractmethod
    def create_resolver(self, resolver: ResolverResource) -> ResolverResource: ...

    @abstractmethod
    def create_function(self, function: FunctionResource) -> FunctionResource: ...

    @abstractmethod
    def update_pipeline_config(
        self, resolver_id: str, function_ids: list[str]
    ) -> ResolverResource: ...

    @abstractmethod
    def get_data_source(self, name: str) -> DataSourceResource | None: ...

    @abstractmethod
    def get_resolver(self, resolver_id: str) -> ResolverResource | None: ...

    @abstractmethod
    def get_function(self, name: str) -> FunctionResource | None: ...


class InMemoryResourceGraph(BaseResourceGraph):
    """Resource graph kept in memory, insertion ordered."""

    def __init__(self) -> None:
        self._api: GraphqlApiResource | None = None
        self._data_sources: dict[str, DataSourceResource] = {}
        self._resolvers: dict[str, ResolverResource] = {}
        self._functions: dict[str, FunctionResource] = {}

    @property
    def api(self) -> GraphqlApiResource | None:
        return self._api

    @property
    def data_sources(self) -> dict[str, DataSourceResource]:
        return dict(self._data_sources)

    @property
    def resolvers(self) -> dict[str, ResolverResource]:
        return dict(self._resolvers)

    @property
    def functions(self) -> dict[str, FunctionResource]:
        return dict(self._functions)

    def create_api(self, api_id: str, **properties: Any) -> GraphqlApiResource:
        if self._api is not None:
            raise DuplicateResourceError(f"API '{self._api.api_id}' already exists")
        self._api = GraphqlApiResource(api_id=api_id, **properties)
        return self._api

    def add_data_source(
        self,
        name: str,
        kind: DataSourceKind = DataSourceKind.NONE,
        properties: dict[str, Any] | None = None,
    ) -> DataSourceResource:
        if name in self._data_sources:
            raise DuplicateDataSourceError(
                f"Data source '{name}' is already registered",
                metadata={"data_source": name},
            )
        data_source = DataSourceResource(name=name, kind=kind, properties=properties or {})
        self._data_sources[name] = data_source
        log_debug(f"Added data source {name}", {"kind": kind.value})
        return data_source

    def create_resolver(self, resolver: ResolverResource) -> ResolverResource:
        if resolver.data_source is not None:
            self._require_data_source(resolver.data_source, resolver.resolver_id)
        if resolver.resolver_id in self._resolvers:
            raise DuplicateResourceError(
                f"Resolver '{resolver.resolver_id}' already exists",
                metadata={"resolver_id": resolver.resolver_id},
            )
        self._resolvers[resolver.resolver_id] = resolver
        return resolver

    def create_function(self, function: FunctionResource) -> FunctionResource:
        self._require_data_source(function.data_source, function.name)
        if function.name in self._functions:
            raise DuplicateResourceError(
                f"Function '{function.name}' already exists",
                metadata={"function": function.name},
            )
        self._functions[function.name] = function
        return function

    def update_pipeline_config(self, resolver_id: str, function_ids: list[str]) -> ResolverResource:
        resolver = self._resolvers.get(resolver_id)
        if resolver is None:
            raise KeyError(f"Unknown resolver '{resolver_id}'")

        unknown = [f for f in function_ids if f not in self._functions]
        if unknown:
            raise KeyError(f"Unknown functions {unknown} for resolver '{resolver_id}'")

        resolver.kind = ResolverKind.PIPELINE
        resolver.pipeline_functions = list(function_ids)
        return resolver

    def get_resolver(self, resolver_id: str) -> ResolverResource | None:
        return self._resolvers.get(resolver_id)

    def get_function(self, name: str) -> FunctionResource | None:
        return self._functions.get(name)

    def get_data_source(self, name: str) -> DataSourceResource | None:
        return self._data_sources.get(name)

    def _require_data_source(self, name: str, resource_id: str) -> None:
        if name not in self._data_sources:
            raise UnknownDataSourceError(
                f"Data source '{name}' of '{resource_id}' is not registered",
                metadata={"data_source": name, "resource": resource_id},
            )

    def find_resolver(self, type_name: str, field_name: str) -> ResolverResource | None:
        """Find the resolver attached to ``type_name.field_name``."""
        for resolver in self._resolvers.values():
            if resolver.type_name == type_name and resolver.field_name == field_name:
                return resolver
        return None

    def synth(self) -> dict[str, Any]:
        """Render every resource as plain data.

        Returns:
            Dictionary with api, data_sources, resolvers and functions.
        """
        return {
            "api": self._api.model_dump(mode="json") if self._api else None,
            "data_sources": {k: v.model_dump(mode="json") for k, v in self._data_sources.items()},
            "resolvers": {k: _dump_with_code(v) for k, v in self._resolvers.items()},
            "functions": {k: _dump_with_code(v) for k, v in self._functions.items()},
        }

    def dump_yaml(self, path: Path | str) -> Path:
        """Write synth() output as YAML to ``path``."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w") as f:
            yaml.safe_dump(self.synth(), f, sort_keys=False)
        return path


def _dump_with_code(resource: ResolverResource | FunctionResource) -> dict[str, Any]:
    data = resource.model_dump(mode="json", exclude={"code"})
    code = resource.code
    if isinstance(code, InlineCode):
        data["code"] = {"inline": code.source}
    elif isinstance(code, CodeAsset):
        data["code"] = {"asset_hash": code.asset_hash, "entry_file": str(code.entry_file)}
    return data


__all__ = [
    "BaseResourceGraph",
    "DataSourceResource",
    "FunctionResource",
    "GraphqlApiResource",
    "InMemoryResourceGraph",
    "JS_RUNTIME",
    "ResolverResource",
]
