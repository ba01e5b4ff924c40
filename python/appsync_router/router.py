"""Convention-based GraphQL API router.

The AppsyncApiRouter is the API root. At construction it scans
``<base_dir>/resolvers`` once. Every data source registered afterwards
re-evaluates that snapshot, assembling the unit resolvers and pipeline
stages tagged with the data source's name and merging them into the state
left by earlier registrations. Registration order is significant: the N-th
registration sees everything registrations 1..N-1 created.

A registration runs in two phases. The plan phase checks every conflict and
bundles every entry file; only then is the data source added and are the
resources created. A failing registration leaves no trace in the graph.

Example:
    >>> router = AppsyncApiRouter(
    ...     "blog",
    ...     RouterConfig(base_dir=Path("infra/blog")),
    ...     bundler=EsbuildBundler(Path("cdk.out/appsync")),
    ... )
    >>> router.add_dynamodb_data_source("users", table_name="users")
    >>> router.add_lambda_data_source("orders", function_arn="arn:aws:lambda:...")
    >>> router.resource_graph.synth()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .aggregator import PipelineAggregator, UnitResolverRegistry
from .assembler import ResolverAssembler, get_function_name, get_resolver_name
from .bundler import BaseBundler, Code
from .classifier import EntryClassifier
from .config import RouterConfig
from .entries import (
    check_exclusive,
    find_function_entry,
    find_resolver_entries,
    find_resolver_entry,
)
from .event_bridge import EventBridge, EventNames
from .exceptions import (
    ConflictingOptionsError,
    DuplicateDataSourceError,
    DuplicateResourceError,
    DuplicateUnitResolverError,
    EntryFileNotFoundError,
    RouterError,
    UnknownDataSourceError,
)
from .grammar import has_source_extension
from .logging import log_debug, log_error, log_info, set_log_level
from .origin import find_defining_file
from .resource_graph import (
    BaseResourceGraph,
    DataSourceResource,
    FunctionResource,
    InMemoryResourceGraph,
    ResolverResource,
)
from .scanner import DirectoryScanner
from .types import (
    BundlingOptions,
    DataSourceKind,
    FieldKey,
    LogContext,
    PipelineDirectoryDescriptor,
    ScanEntry,
    StageDescriptor,
    UnitResolverDescriptor,
)

DataSourceRef = DataSourceResource | str


@dataclass
class _Plan:
    """Resources one call is about to create, checked before any of them is.

    Resource ids are reserved as they are planned so that two fields of the
    same call cannot claim the same id either.
    """

    graph: BaseResourceGraph
    units: list[UnitResolverDescriptor] = field(default_factory=list)
    pipelines: list[tuple[PipelineDirectoryDescriptor, list[StageDescriptor]]] = field(
        default_factory=list
    )
    resolver_ids: set[str] = field(default_factory=set)
    function_ids: set[str] = field(default_factory=set)
    codes: dict[Path, Code] = field(default_factory=dict)
    wrappers: dict[FieldKey, Code] = field(default_factory=dict)

    @property
    def unit_fields(self) -> set[FieldKey]:
        return {d.field_key for d in self.units}

    def resolver_exists(self, resolver_id: str) -> bool:
        return resolver_id in self.resolver_ids or self.graph.get_resolver(resolver_id) is not None

    def function_exists(self, name: str) -> bool:
        return name in self.function_ids or self.graph.get_function(name) is not None

    def reserve_resolver(self, resolver_id: str, field_key: FieldKey) -> None:
        if self.resolver_exists(resolver_id):
            raise DuplicateResourceError(
                f"Resolver '{resolver_id}' for {field_key} is already taken",
                metadata={"field": str(field_key), "resolver_id": resolver_id},
            )
        self.resolver_ids.add(resolver_id)


class AppsyncApiRouter:
    """GraphQL API root that wires resolvers from filesystem conventions.

    Args:
        api_id: Construct id of the API. Also the default API name.
        config: Router configuration. When ``config.base_dir`` is None the
            base directory is ``<dir of the constructing file>/<api_id>``.
        bundler: Bundler used for every entry file.
        resource_graph: Resource graph to write into. Defaults to an
            InMemoryResourceGraph.
        event_bridge: Bridge receiving lifecycle events. Defaults to the
            process-wide EventBridge.

    Raises:
        AmbiguousOriginError: If base_dir must be inferred and cannot be.
        EntryFileNotFoundError: If the schema file does not exist.
        DirectoryNotFoundError: If the resolvers directory does not exist.
    """

    def __init__(
        self,
        api_id: str,
        config: RouterConfig | None = None,
        *,
        bundler: BaseBundler,
        resource_graph: BaseResourceGraph | None = None,
        event_bridge: EventBridge | None = None,
    ) -> None:
        config = config or RouterConfig()
        if config.log_level is not None:
            set_log_level(config.log_level)

        if config.base_dir is None:
            base_dir = find_defining_file("__init__").parent / api_id
        else:
            base_dir = Path(config.base_dir)

        self._api_id = api_id
        self._base_dir = base_dir
        self._config = config.model_copy(update={"base_dir": base_dir})
        self._graph = resource_graph if resource_graph is not None else InMemoryResourceGraph()
        self._bridge = event_bridge if event_bridge is not None else EventBridge.instance()
        self._assembler = ResolverAssembler(bundler, self._graph, self._bridge, config.bundling)

        schema_path = base_dir / config.schema_file
        if not schema_path.is_file():
            raise EntryFileNotFoundError(
                f"Cannot find schema file at {schema_path}",
                attempted=[str(schema_path)],
            )

        self._graph.create_api(
            api_id,
            name=self.name,
            schema_file=schema_path,
            xray_enabled=config.xray_enabled,
            visibility=config.visibility,
            introspection=config.introspection,
            authorization_config=config.authorization_config,
            log_config=config.log_config,
            domain_name=config.domain_name,
        )

        self._entries = DirectoryScanner.scan(base_dir / config.resolvers_dir)
        self._classifier = EntryClassifier(self._entries)
        self._units = UnitResolverRegistry()
        self._aggregator = PipelineAggregator(self._units)
        self._unit_resolvers: dict[FieldKey, ResolverResource] = {}
        self._pipeline_resolvers: dict[FieldKey, ResolverResource] = {}

        log_info(
            f"Router {api_id} scanned {len(self._entries)} entries",
            LogContext(api_id=api_id, operation="scan"),
        )

    @property
    def api_id(self) -> str:
        return self._api_id

    @property
    def name(self) -> str:
        return self._config.name or self._api_id

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @property
    def config(self) -> RouterConfig:
        return self._config

    @property
    def entries(self) -> tuple[ScanEntry, ...]:
        """The snapshot taken at construction."""
        return self._entries

    @property
    def resource_graph(self) -> BaseResourceGraph:
        return self._graph

    @property
    def aggregator(self) -> PipelineAggregator:
        return self._aggregator

    @property
    def unit_resolvers(self) -> dict[FieldKey, ResolverResource]:
        return dict(self._unit_resolvers)

    @property
    def pipeline_resolvers(self) -> dict[FieldKey, ResolverResource]:
        return dict(self._pipeline_resolvers)

    # ------------------------------------------------------------------
    # Data source registration
    # ------------------------------------------------------------------

    def register_data_source(
        self,
        name: str,
        kind: DataSourceKind = DataSourceKind.NONE,
        **properties: Any,
    ) -> DataSourceResource:
        """Add a data source and assemble every resolver tagged with its name.

        Nothing is added to the resource graph, the data source included,
        unless every resolver and stage of the data source can be created.

        Args:
            name: Data source name, matched against ``[name]`` filename tags.
            kind: Backend integration kind.
            **properties: Integration specific properties (table name, ...).

        Returns:
            The data source resource.

        Raises:
            DuplicateDataSourceError: If ``name`` is already registered.
            DuplicateUnitResolverError: If a field gets two unit resolvers, or
                both a unit resolver and a pipeline.
            DuplicateStageError: If pipeline stages collide.
            DuplicateResourceError: If two fields map to the same resource id.
            BundlingError: If an entry file cannot be bundled.
        """
        context = LogContext(
            api_id=self._api_id, data_source=name, operation="register_data_source"
        )
        try:
            if self._graph.get_data_source(name) is not None:
                raise DuplicateDataSourceError(
                    f"Data source '{name}' is already registered",
                    metadata={"data_source": name},
                )
            plan = self._plan_data_source(name)
            data_source = self._graph.add_data_source(
                name,
                kind,
                {k: v for k, v in properties.items() if v is not None},
            )
            self._apply(plan, name)
        except RouterError as e:
            log_error(f"Failed to register data source {name}: {e.message}", context)
            raise

        log_info(f"Registered data source {name}", context)
        self._bridge.publish(EventNames.DATA_SOURCE_REGISTERED, data_source)
        return data_source

    def add_none_data_source(
        self, name: str, *, description: str | None = None
    ) -> DataSourceResource:
        """Add a NONE data source and load its resolvers/functions."""
        return self.register_data_source(name, DataSourceKind.NONE, description=description)

    def add_http_data_source(
        self,
        name: str,
        endpoint: str,
        *,
        description: str | None = None,
        authorization_config: dict[str, Any] | None = None,
    ) -> DataSourceResource:
        """Add an HTTP data source and load its resolvers/functions."""
        return self.register_data_source(
            name,
            DataSourceKind.HTTP,
            endpoint=endpoint,
            description=description,
            authorization_config=authorization_config,
        )

    def add_dynamodb_data_source(
        self,
        name: str,
        table_name: str,
        *,
        description: str | None = None,
    ) -> DataSourceResource:
        """Add a DynamoDB data source and load its resolvers/functions."""
        return self.register_data_source(
            name, DataSourceKind.DYNAMODB, table_name=table_name, description=description
        )

    def add_lambda_data_source(
        self,
        name: str,
        function_arn: str,
        *,
        description: str | None = None,
    ) -> DataSourceResource:
        """Add a Lambda data source and load its resolvers/functions."""
        return self.register_data_source(
            name, DataSourceKind.LAMBDA, function_arn=function_arn, description=description
        )

    def add_rds_data_source(
        self,
        name: str,
        cluster_arn: str,
        secret_arn: str,
        database_name: str | None = None,
        *,
        description: str | None = None,
    ) -> DataSourceResource:
        """Add an RDS data source and load its resolvers/functions."""
        return self.register_data_source(
            name,
            DataSourceKind.RDS,
            cluster_arn=cluster_arn,
            secret_arn=secret_arn,
            database_name=database_name,
            description=description,
        )

    def add_event_bridge_data_source(
        self,
        name: str,
        event_bus_arn: str,
        *,
        description: str | None = None,
    ) -> DataSourceResource:
        """Add an EventBridge data source and load its resolvers/functions."""
        return self.register_data_source(
            name, DataSourceKind.EVENTBRIDGE, event_bus_arn=event_bus_arn, description=description
        )

    def add_opensearch_data_source(
        self,
        name: str,
        domain_endpoint: str,
        *,
        description: str | None = None,
    ) -> DataSourceResource:
        """Add an OpenSearch data source and load its resolvers/functions."""
        return self.register_data_source(
            name,
            DataSourceKind.OPENSEARCH,
            domain_endpoint=domain_endpoint,
            description=description,
        )

    # ------------------------------------------------------------------
    # Explicit resolvers and functions
    # ------------------------------------------------------------------

    def create_js_resolver(
        self,
        data_source: DataSourceRef,
        type_name: str,
        field_name: str,
        *,
        entry_file: str | Path | None = None,
        entry_dir: str | Path | None = None,
        bundling: BundlingOptions | None = None,
    ) -> ResolverResource:
        """Create a unit resolver from an explicit file or directory.

        Without either option the resolver is looked up in
        ``<base_dir>/resolvers``.

        Raises:
            ConflictingOptionsError: If both entry_file and entry_dir are given.
            InvalidExtensionError: If entry_file is not .ts or .js.
            EntryFileNotFoundError: If no entry file exists.
            UnknownDataSourceError: If the data source is not registered.
            DuplicateUnitResolverError: If the field is already resolved.
        """
        check_exclusive(entry_file, entry_dir)
        if entry_file is None and entry_dir is None:
            entry_dir = self.base_dir / self._config.resolvers_dir

        entry = find_resolver_entry(type_name, field_name, entry_file, entry_dir)
        descriptor = UnitResolverDescriptor(
            field_key=FieldKey(type_name=type_name, field_name=field_name),
            data_source_name=self._data_source_name(data_source),
            entry_path=entry,
        )
        self._plan_unit_resolver(_Plan(self._graph), descriptor)
        code = self._assembler.bundle(entry, bundling)
        return self._create_unit_resolver(descriptor, code)

    def create_js_pipeline_resolver(
        self,
        type_name: str,
        field_name: str,
        *,
        entry_file: str | Path | None = None,
        entry_dir: str | Path | None = None,
        bundling: BundlingOptions | None = None,
    ) -> ResolverResource:
        """Create a pipeline resolver with an explicit wrapper file.

        Stages discovered later for the same field are merged into it.

        Raises:
            ConflictingOptionsError: If both entry_file and entry_dir are given.
            InvalidExtensionError: If entry_file is not .ts or .js.
            EntryFileNotFoundError: If no entry file exists.
            DuplicateResourceError: If the field already has a pipeline, or its
                resolver id is taken.
            DuplicateUnitResolverError: If the field is a unit resolver.
        """
        check_exclusive(entry_file, entry_dir)
        if entry_file is None and entry_dir is None:
            entry_dir = self.base_dir / self._config.resolvers_dir

        field_key = FieldKey(type_name=type_name, field_name=field_name)
        entry = find_resolver_entry(type_name, field_name, entry_file, entry_dir)
        if field_key in self._aggregator:
            raise DuplicateResourceError(
                f"Field {field_key} already has a pipeline resolver",
                metadata={"field": str(field_key)},
            )
        self._aggregator.check(
            field_key,
            [],
            resolver_id=get_resolver_name(type_name, field_name),
            resolver_exists=lambda rid: self._graph.get_resolver(rid) is not None,
        )

        code = self._assembler.bundle(entry, bundling)
        self._contribute(field_key, [], {}, code, data_source_name="")
        return self._pipeline_resolvers[field_key]

    def create_js_function(
        self,
        data_source: DataSourceRef,
        name: str,
        *,
        entry_file: str | Path | None = None,
        entry_dir: str | Path | None = None,
        bundling: BundlingOptions | None = None,
    ) -> FunctionResource:
        """Create a function from an explicit file or directory.

        Without either option the function is looked up in
        ``<base_dir>/functions``.

        Raises:
            ConflictingOptionsError: If both entry_file and entry_dir are given.
            InvalidExtensionError: If entry_file or name has a foreign extension.
            EntryFileNotFoundError: If no entry file exists.
            UnknownDataSourceError: If the data source is not registered.
            DuplicateResourceError: If a function with that name exists.
        """
        check_exclusive(entry_file, entry_dir)
        if entry_file is None and entry_dir is None:
            entry_dir = self.base_dir / self._config.functions_dir

        entry = find_function_entry(name, entry_file, entry_dir)
        function_name = name.rsplit(".", 1)[0] if has_source_extension(name) else name
        data_source_name = self._data_source_name(data_source)
        if self._graph.get_function(function_name) is not None:
            raise DuplicateResourceError(
                f"Function '{function_name}' already exists",
                metadata={"function": function_name},
            )

        code = self._assembler.bundle(entry, bundling)
        return self._assembler.function(function_name, data_source_name, code)

    def load_js_resolvers(
        self,
        data_source: DataSourceRef,
        *,
        entry_file: str | Path | None = None,
        entry_dir: str | Path | None = None,
        bundling: BundlingOptions | None = None,
    ) -> list[ResolverResource]:
        """Create one unit resolver per ``Type.field.ts|js`` file in a directory.

        The directory defaults to ``<base_dir>/resolvers/<api name>``.

        Raises:
            ConflictingOptionsError: If entry_file is given.
            DirectoryNotFoundError: If the directory does not exist.
            UnknownDataSourceError: If the data source is not registered.
            DuplicateUnitResolverError: If any field is already resolved; no
                resolver is created in that case.
        """
        if entry_file is not None:
            raise ConflictingOptionsError(
                "entry_file is not supported when loading multiple resolvers",
                metadata={"entry_file": str(entry_file)},
            )
        if entry_dir is not None:
            directory = Path(entry_dir)
        else:
            directory = self.base_dir / self._config.resolvers_dir / self.name

        found = find_resolver_entries(directory)
        data_source_name = self._data_source_name(data_source)

        plan = _Plan(self._graph)
        for resolver in found:
            self._plan_unit_resolver(
                plan,
                UnitResolverDescriptor(
                    field_key=resolver.field_key,
                    data_source_name=data_source_name,
                    entry_path=resolver.entry_path,
                ),
            )

        codes = [self._assembler.bundle(d.entry_path, bundling) for d in plan.units]
        return [self._create_unit_resolver(d, code) for d, code in zip(plan.units, codes)]

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def _plan_data_source(self, data_source_name: str) -> _Plan:
        plan = _Plan(self._graph)

        def function_id(stage: StageDescriptor) -> str:
            return get_function_name(stage.field_key, data_source_name, stage.stage_name)

        for descriptor in self._classifier.unit_resolvers(data_source_name):
            self._plan_unit_resolver(plan, descriptor)

        for directory in self._classifier.pipeline_directories():
            field_key = directory.field_key
            if field_key in plan.unit_fields:
                raise DuplicateUnitResolverError(
                    f"Field {field_key} is both a unit resolver and a pipeline",
                    metadata={"field": str(field_key), "data_sources": [data_source_name]},
                )

            stages = self._classifier.stages(directory, data_source_name)
            resolver_id = get_resolver_name(field_key.type_name, field_key.field_name)
            self._aggregator.check(
                field_key,
                stages,
                resolver_id=resolver_id,
                function_id=function_id,
                resolver_exists=plan.resolver_exists,
                function_exists=plan.function_exists,
            )
            if field_key not in self._aggregator:
                plan.resolver_ids.add(resolver_id)
            plan.function_ids.update(function_id(s) for s in stages)
            plan.pipelines.append((directory, stages))

        # bundle only once every check has passed
        for descriptor in plan.units:
            plan.codes[descriptor.entry_path] = self._assembler.bundle(descriptor.entry_path)
        for directory, stages in plan.pipelines:
            if directory.field_key not in self._aggregator:
                wrapper = self._classifier.wrapper(directory)
                if wrapper is not None:
                    plan.wrappers[directory.field_key] = self._assembler.bundle(
                        wrapper.entry_path
                    )
            for stage in stages:
                plan.codes[stage.entry_path] = self._assembler.bundle(stage.entry_path)

        log_debug(
            f"Planned data source {data_source_name}",
            {"units": len(plan.units), "pipelines": len(plan.pipelines)},
        )
        return plan

    def _plan_unit_resolver(self, plan: _Plan, descriptor: UnitResolverDescriptor) -> None:
        field_key = descriptor.field_key
        if field_key in plan.unit_fields:
            raise DuplicateUnitResolverError(
                f"Field {field_key} has more than one resolver file for data source "
                f"'{descriptor.data_source_name}'",
                metadata={"field": str(field_key), "data_sources": [descriptor.data_source_name]},
            )
        self._units.check(field_key, descriptor.data_source_name, self._aggregator)
        resolver_id = get_resolver_name(field_key.type_name, field_key.field_name)
        plan.reserve_resolver(resolver_id, field_key)
        plan.units.append(descriptor)

    def _apply(self, plan: _Plan, data_source_name: str) -> None:
        for descriptor in plan.units:
            self._create_unit_resolver(descriptor, plan.codes[descriptor.entry_path])

        for directory, stages in plan.pipelines:
            self._contribute(
                directory.field_key,
                stages,
                plan.codes,
                plan.wrappers.get(directory.field_key),
                data_source_name,
            )

    def _contribute(
        self,
        field_key: FieldKey,
        stages: list[StageDescriptor],
        codes: dict[Path, Code],
        wrapper_code: Code | None,
        data_source_name: str,
    ) -> None:
        def function_id(stage: StageDescriptor) -> str:
            return get_function_name(field_key, data_source_name, stage.stage_name)

        def create_resolver() -> str:
            resolver = self._assembler.pipeline_resolver(field_key, wrapper_code)
            self._pipeline_resolvers[field_key] = resolver
            return resolver.resolver_id

        def create_function(stage: StageDescriptor) -> str:
            function = self._assembler.function(
                function_id(stage), data_source_name, codes[stage.entry_path]
            )
            return function.function_id

        state = self._aggregator.contribute(
            field_key,
            stages,
            create_resolver=create_resolver,
            create_function=create_function,
            resolver_id=get_resolver_name(field_key.type_name, field_key.field_name),
            function_id=function_id,
            resolver_exists=lambda rid: self._graph.get_resolver(rid) is not None,
            function_exists=lambda name: self._graph.get_function(name) is not None,
        )
        self._pipeline_resolvers[field_key] = self._assembler.update_pipeline(
            state.resolver_id, state.function_ids
        )

    def _create_unit_resolver(
        self, descriptor: UnitResolverDescriptor, code: Code
    ) -> ResolverResource:
        resolver = self._assembler.unit_resolver(
            descriptor.data_source_name, descriptor.field_key, code
        )
        self._units.claim(descriptor, self._aggregator)
        self._unit_resolvers[descriptor.field_key] = resolver
        return resolver

    def _data_source_name(self, data_source: DataSourceRef) -> str:
        name = data_source.name if isinstance(data_source, DataSourceResource) else data_source
        if self._graph.get_data_source(name) is None:
            raise UnknownDataSourceError(
                f"Data source '{name}' is not registered with API {self._api_id}",
                metadata={"data_source": name, "api_id": self._api_id},
            )
        return name


__all__ = ["AppsyncApiRouter"]
