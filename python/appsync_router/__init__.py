"""
AppSync API Router

This package assembles GraphQL resolver definitions from filesystem naming
conventions. No manifest enumerates the mapping: file and directory names
decide whether a field is served by a unit resolver or by an ordered
pipeline of functions, and which data source each handler targets.

Example:
    >>> from pathlib import Path
    >>> from appsync_router import AppsyncApiRouter, EsbuildBundler, RouterConfig
    >>>
    >>> # infra/blog/schema.graphql
    >>> # infra/blog/resolvers/Query.getUser/1.fetch.[users].ts
    >>> # infra/blog/resolvers/Query.getUser/2.format.[users].ts
    >>> # infra/blog/resolvers/Mutation.updateUser.[orders].ts
    >>> router = AppsyncApiRouter(
    ...     "blog",
    ...     RouterConfig(base_dir=Path("infra/blog")),
    ...     bundler=EsbuildBundler(Path("cdk.out/appsync")),
    ... )
    >>> router.add_dynamodb_data_source("users", table_name="users")
    >>> router.add_lambda_data_source("orders", function_arn="arn:aws:lambda:...")
    >>> router.resource_graph.dump_yaml("cdk.out/appsync/graph.yaml")
"""

from __future__ import annotations

from appsync_router.aggregator import (
    PipelineAggregator,
    PipelineStage,
    PipelineState,
    UnitResolverRegistry,
)
from appsync_router.assembler import (
    DEFAULT_PIPELINE_RESOLVER_CODE,
    ResolverAssembler,
    get_function_name,
    get_resolver_name,
)
from appsync_router.bundler import (
    BaseBundler,
    CodeAsset,
    EsbuildBundler,
    InlineCode,
    fingerprint,
)
from appsync_router.classifier import EntryClassifier
from appsync_router.config import RouterConfig, find_config_file, load_router_config
from appsync_router.event_bridge import EventBridge, EventNames
from appsync_router.exceptions import (
    AmbiguousOriginError,
    BundlingError,
    ConfigurationError,
    ConflictingOptionsError,
    DirectoryNotFoundError,
    DuplicateDataSourceError,
    DuplicateResourceError,
    DuplicateStageError,
    DuplicateUnitResolverError,
    EntryFileNotFoundError,
    InvalidExtensionError,
    RouterError,
    UnknownDataSourceError,
)
from appsync_router.logging import (
    configure_logging,
    log_debug,
    log_error,
    log_info,
    log_trace,
    log_warn,
    set_log_level,
)
from appsync_router.resource_graph import (
    BaseResourceGraph,
    DataSourceResource,
    FunctionResource,
    GraphqlApiResource,
    InMemoryResourceGraph,
    ResolverResource,
)
from appsync_router.router import AppsyncApiRouter
from appsync_router.scanner import DirectoryScanner
from appsync_router.types import (
    BundlingOptions,
    DataSourceKind,
    FieldKey,
    LogContext,
    PipelineDirectoryDescriptor,
    ResolverKind,
    ScanEntry,
    StageDescriptor,
    UnitResolverDescriptor,
    WrapperDescriptor,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # API root
    "AppsyncApiRouter",
    "RouterConfig",
    "find_config_file",
    "load_router_config",
    # Discovery
    "DirectoryScanner",
    "EntryClassifier",
    "PipelineAggregator",
    "PipelineStage",
    "PipelineState",
    "UnitResolverRegistry",
    # Assembly
    "ResolverAssembler",
    "DEFAULT_PIPELINE_RESOLVER_CODE",
    "get_function_name",
    "get_resolver_name",
    # Bundling
    "BaseBundler",
    "EsbuildBundler",
    "CodeAsset",
    "InlineCode",
    "fingerprint",
    # Resource graph
    "BaseResourceGraph",
    "InMemoryResourceGraph",
    "GraphqlApiResource",
    "DataSourceResource",
    "ResolverResource",
    "FunctionResource",
    # Events
    "EventBridge",
    "EventNames",
    # Types
    "BundlingOptions",
    "DataSourceKind",
    "FieldKey",
    "LogContext",
    "PipelineDirectoryDescriptor",
    "ResolverKind",
    "ScanEntry",
    "StageDescriptor",
    "UnitResolverDescriptor",
    "WrapperDescriptor",
    # Errors
    "RouterError",
    "DirectoryNotFoundError",
    "EntryFileNotFoundError",
    "InvalidExtensionError",
    "ConflictingOptionsError",
    "AmbiguousOriginError",
    "DuplicateUnitResolverError",
    "DuplicateStageError",
    "DuplicateResourceError",
    "DuplicateDataSourceError",
    "UnknownDataSourceError",
    "BundlingError",
    "ConfigurationError",
    # Logging
    "configure_logging",
    "log_error",
    "log_warn",
    "log_info",
    "log_debug",
    "log_trace",
    "set_log_level",
]


def version() -> str:
    """Return the package version."""
    return __version__
