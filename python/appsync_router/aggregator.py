"""Per-field aggregation of resolver contributions.

Data sources are registered one at a time. Each registration may contribute
pipeline stages to fields that earlier registrations already touched, so the
aggregator keeps one PipelineState per FieldKey and merges into it:

- Absent -> Active: first contribution creates the pipeline resolver.
- Active -> Active: new stages are appended and the whole list is stably
  re-sorted by order. The resolver is reused, never replaced.

Unit resolvers are not merged. A field can be claimed by exactly one unit
resolver; a second claim is rejected.
"""

from __future__ import annotations

from collections.abc import Callable, Container, Iterator, Sequence
from dataclasses import dataclass, field

from .exceptions import DuplicateResourceError, DuplicateStageError, DuplicateUnitResolverError
from .logging import log_debug
from .types import FieldKey, StageDescriptor, UnitResolverDescriptor


@dataclass
class PipelineStage:
    """A stage descriptor together with the function created for it."""

    descriptor: StageDescriptor
    function_id: str


@dataclass
class PipelineState:
    """Merged state of one pipeline field.

    Attributes:
        field_key: The field this pipeline resolves.
        resolver_id: Id of the pipeline resolver, created once.
        members: Stages sorted ascending by order (stable).
    """

    field_key: FieldKey
    resolver_id: str
    members: list[PipelineStage] = field(default_factory=list)

    @property
    def stages(self) -> list[StageDescriptor]:
        return [m.descriptor for m in self.members]

    @property
    def function_ids(self) -> list[str]:
        return [m.function_id for m in self.members]


class PipelineAggregator:
    """Keyed container of PipelineState, one per FieldKey.

    Example:
        >>> aggregator = PipelineAggregator()
        >>> state = aggregator.contribute(
        ...     key,
        ...     stages,
        ...     create_resolver=lambda: graph.create_resolver(...).id,
        ...     create_function=lambda stage: graph.create_function(...).function_id,
        ... )
        >>> state.function_ids
        ['fn-1', 'fn-2']
    """

    def __init__(self, unit_resolvers: Container[FieldKey] = ()) -> None:
        self._pipelines: dict[FieldKey, PipelineState] = {}
        self._unit_resolvers = unit_resolvers

    def check(
        self,
        field_key: FieldKey,
        stages: Sequence[StageDescriptor],
        *,
        resolver_id: str | None = None,
        function_id: Callable[[StageDescriptor], str] | None = None,
        resolver_exists: Callable[[str], bool] | None = None,
        function_exists: Callable[[str], bool] | None = None,
    ) -> None:
        """Raise if ``stages`` cannot be merged into the pipeline of ``field_key``.

        Besides the stage checks, the ids the contribution would create are
        checked against ``resolver_exists`` and ``function_exists``: the
        resolver id only while the field is still absent, every function id
        always.

        Raises:
            DuplicateStageError: If stages collide on (order, data source) or on
                stage name within one data source.
            DuplicateUnitResolverError: If the field is already a unit resolver.
            DuplicateResourceError: If a resolver or function id is taken.
        """
        state = self._pipelines.get(field_key)
        if state is None and field_key in self._unit_resolvers:
            raise DuplicateUnitResolverError(
                f"Field {field_key} is already resolved by a unit resolver",
                metadata={"field": str(field_key)},
            )

        existing = state.stages if state is not None else []
        self._validate(field_key, existing, stages)

        if state is None and resolver_id is not None and resolver_exists is not None:
            if resolver_exists(resolver_id):
                raise DuplicateResourceError(
                    f"Resolver '{resolver_id}' for {field_key} is already taken",
                    metadata={"field": str(field_key), "resolver_id": resolver_id},
                )

        if function_id is None:
            return
        seen: set[str] = set()
        for stage in stages:
            name = function_id(stage)
            if name in seen or (function_exists is not None and function_exists(name)):
                raise DuplicateResourceError(
                    f"Function '{name}' for stage {stage.entry_path.name} of {field_key} "
                    "is already taken",
                    metadata={"field": str(field_key), "function": name},
                )
            seen.add(name)

    def contribute(
        self,
        field_key: FieldKey,
        stages: Sequence[StageDescriptor],
        *,
        create_resolver: Callable[[], str],
        create_function: Callable[[StageDescriptor], str],
        resolver_id: str | None = None,
        function_id: Callable[[StageDescriptor], str] | None = None,
        resolver_exists: Callable[[str], bool] | None = None,
        function_exists: Callable[[str], bool] | None = None,
    ) -> PipelineState:
        """Merge ``stages`` into the pipeline of ``field_key``.

        Everything is checked (see check()) before anything is created, so a
        rejected contribution leaves earlier state untouched.

        Args:
            field_key: Field the stages belong to.
            stages: Newly discovered stages for one data source.
            create_resolver: Creates the pipeline resolver; called at most once
                per field, returns its id.
            create_function: Creates the function of one stage, returns its id.
            resolver_id: Id create_resolver will use.
            function_id: Id create_function will use for a stage.
            resolver_exists: Whether a resolver id is already taken.
            function_exists: Whether a function id is already taken.

        Returns:
            The merged state, stages sorted by order.
        """
        self.check(
            field_key,
            stages,
            resolver_id=resolver_id,
            function_id=function_id,
            resolver_exists=resolver_exists,
            function_exists=function_exists,
        )

        state = self._pipelines.get(field_key)
        if state is None:
            state = PipelineState(field_key=field_key, resolver_id=create_resolver())
            self._pipelines[field_key] = state
            log_debug(f"Created pipeline state for {field_key}")

        new_members = [PipelineStage(stage, create_function(stage)) for stage in stages]

        # sorted() is stable: equal orders keep insertion order
        state.members = sorted(state.members + new_members, key=lambda m: m.descriptor.order)

        if new_members:
            log_debug(
                f"Merged {len(new_members)} stages into {field_key}",
                {"stages": ",".join(s.stage_name for s in state.stages)},
            )
        return state

    def state(self, field_key: FieldKey) -> PipelineState | None:
        return self._pipelines.get(field_key)

    def field_keys(self) -> list[FieldKey]:
        return list(self._pipelines)

    def __contains__(self, field_key: object) -> bool:
        return field_key in self._pipelines

    def __len__(self) -> int:
        return len(self._pipelines)

    def __iter__(self) -> Iterator[PipelineState]:
        return iter(self._pipelines.values())

    @staticmethod
    def _validate(
        field_key: FieldKey,
        existing: Sequence[StageDescriptor],
        incoming: Sequence[StageDescriptor],
    ) -> None:
        orders = {(s.order, s.data_source_name): s for s in existing}
        names = {(s.stage_name, s.data_source_name): s for s in existing}

        for stage in incoming:
            if stage.field_key != field_key:
                raise ValueError(
                    f"Stage {stage.stage_name} belongs to {stage.field_key}, not {field_key}"
                )

            clash = orders.get((stage.order, stage.data_source_name))
            if clash is not None:
                raise DuplicateStageError(
                    f"Pipeline {field_key} has two stages with order {stage.order} "
                    f"for data source '{stage.data_source_name}': "
                    f"{clash.entry_path.name} and {stage.entry_path.name}",
                    metadata={
                        "field": str(field_key),
                        "order": stage.order,
                        "data_source": stage.data_source_name,
                        "paths": [str(clash.entry_path), str(stage.entry_path)],
                    },
                )

            clash = names.get((stage.stage_name, stage.data_source_name))
            if clash is not None:
                raise DuplicateStageError(
                    f"Pipeline {field_key} has two stages named '{stage.stage_name}' "
                    f"for data source '{stage.data_source_name}'",
                    metadata={
                        "field": str(field_key),
                        "stage": stage.stage_name,
                        "data_source": stage.data_source_name,
                        "paths": [str(clash.entry_path), str(stage.entry_path)],
                    },
                )

            orders[(stage.order, stage.data_source_name)] = stage
            names[(stage.stage_name, stage.data_source_name)] = stage


class UnitResolverRegistry:
    """Claims of unit resolvers on fields.

    Example:
        >>> registry = UnitResolverRegistry()
        >>> registry.claim(descriptor)
        >>> registry.claim(other_descriptor_for_same_field)
        Traceback (most recent call last):
        DuplicateUnitResolverError: ...
    """

    def __init__(self) -> None:
        self._claims: dict[FieldKey, str] = {}

    def check(
        self,
        field_key: FieldKey,
        data_source_name: str,
        pipelines: Container[FieldKey] = (),
    ) -> None:
        """Raise if ``field_key`` cannot be claimed by ``data_source_name``.

        Raises:
            DuplicateUnitResolverError: If the field is already claimed, or is
                already a pipeline.
        """
        owner = self._claims.get(field_key)
        if owner is not None:
            raise DuplicateUnitResolverError(
                f"Field {field_key} already has a unit resolver for data source "
                f"'{owner}'; '{data_source_name}' cannot claim it too",
                metadata={"field": str(field_key), "data_sources": [owner, data_source_name]},
            )
        if field_key in pipelines:
            raise DuplicateUnitResolverError(
                f"Field {field_key} is already resolved by a pipeline",
                metadata={"field": str(field_key), "data_sources": [data_source_name]},
            )

    def claim(
        self,
        descriptor: UnitResolverDescriptor,
        pipelines: Container[FieldKey] = (),
    ) -> None:
        """Record ``descriptor`` as the unit resolver of its field.

        Raises:
            DuplicateUnitResolverError: If the field is already claimed.
        """
        self.check(descriptor.field_key, descriptor.data_source_name, pipelines)
        self._claims[descriptor.field_key] = descriptor.data_source_name

    def owner(self, field_key: FieldKey) -> str | None:
        return self._claims.get(field_key)

    def __contains__(self, field_key: object) -> bool:
        return field_key in self._claims

    def __len__(self) -> int:
        return len(self._claims)


__all__ = [
    "PipelineAggregator",
    "PipelineStage",
    "PipelineState",
    "UnitResolverRegistry",
]
