"""Classification of snapshot entries into resolver descriptors.

The classifier applies the filename grammar to a DirectoryScanner snapshot
and answers, for one data source at a time, which unit resolvers, pipeline
directories, stages and wrappers it should contribute.
"""

from __future__ import annotations

from collections.abc import Sequence

from . import grammar
from .logging import log_trace
from .types import (
    FieldKey,
    PipelineDirectoryDescriptor,
    ScanEntry,
    StageDescriptor,
    UnitResolverDescriptor,
    WrapperDescriptor,
)


class EntryClassifier:
    """Typed view over an immutable snapshot.

    Example:
        >>> classifier = EntryClassifier(DirectoryScanner.scan(resolvers_dir))
        >>> for directory in classifier.pipeline_directories():
        ...     stages = classifier.stages(directory, "users")
    """

    def __init__(self, entries: Sequence[ScanEntry]) -> None:
        self._entries = tuple(entries)
        self._children: dict[str, list[ScanEntry]] = {}
        for entry in self._entries:
            self._children.setdefault(entry.parent, []).append(entry)

    @property
    def entries(self) -> tuple[ScanEntry, ...]:
        return self._entries

    def unit_resolvers(self, data_source_name: str) -> list[UnitResolverDescriptor]:
        """Unit resolver files tagged with ``data_source_name``.

        Args:
            data_source_name: Target data source.

        Returns:
            Descriptors in snapshot order.
        """
        descriptors: list[UnitResolverDescriptor] = []
        for entry in self._entries:
            if entry.is_directory:
                continue

            token = grammar.parse_unit_resolver_file(entry.name)
            if token is None or token.data_source_name != data_source_name:
                continue

            log_trace(f"Matched unit resolver {entry.relative_path}")
            descriptors.append(
                UnitResolverDescriptor(
                    field_key=FieldKey(type_name=token.type_name, field_name=token.field_name),
                    data_source_name=token.data_source_name,
                    entry_path=entry.path,
                )
            )
        return descriptors

    def pipeline_directories(self) -> list[PipelineDirectoryDescriptor]:
        """Every ``Type.field`` directory, regardless of data source."""
        descriptors: list[PipelineDirectoryDescriptor] = []
        for entry in self._entries:
            if not entry.is_directory:
                continue

            token = grammar.parse_pipeline_directory(entry.name)
            if token is None:
                continue

            descriptors.append(
                PipelineDirectoryDescriptor(
                    field_key=FieldKey(type_name=token.type_name, field_name=token.field_name),
                    entry_path=entry.path,
                    relative_path=entry.relative_path,
                )
            )
        return descriptors

    def stages(
        self,
        directory: PipelineDirectoryDescriptor,
        data_source_name: str,
    ) -> list[StageDescriptor]:
        """Stage files directly inside ``directory`` tagged with ``data_source_name``.

        Args:
            directory: Pipeline directory to look into.
            data_source_name: Target data source.

        Returns:
            Descriptors in snapshot order (not yet sorted by order).
        """
        descriptors: list[StageDescriptor] = []
        for entry in self._children.get(directory.relative_path, []):
            if entry.is_directory:
                continue

            token = grammar.parse_stage_file(entry.name)
            if token is None or token.data_source_name != data_source_name:
                continue

            log_trace(f"Matched pipeline stage {entry.relative_path}")
            descriptors.append(
                StageDescriptor(
                    field_key=directory.field_key,
                    order=token.order,
                    stage_name=token.stage_name,
                    data_source_name=token.data_source_name,
                    entry_path=entry.path,
                )
            )
        return descriptors

    def wrapper(self, directory: PipelineDirectoryDescriptor) -> WrapperDescriptor | None:
        """The ``resolver.ts|js`` file of ``directory``, if any.

        ``resolver.ts`` wins when both extensions are present.
        """
        candidates = [
            entry
            for entry in self._children.get(directory.relative_path, [])
            if entry.is_file and grammar.is_wrapper_file(entry.name)
        ]
        if not candidates:
            return None

        candidates.sort(key=lambda e: grammar.SOURCE_EXTENSIONS.index(e.name.rsplit(".", 1)[1]))
        return WrapperDescriptor(field_key=directory.field_key, entry_path=candidates[0].path)


__all__ = ["EntryClassifier"]
