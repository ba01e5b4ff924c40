"""Pydantic models for appsync-router.

This module provides the data model shared by the scanner, classifier,
aggregator and assembler, using Pydantic v2 for validation.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class DataSourceKind(str, Enum):
    """Backend integration kinds a data source can target."""

    NONE = "NONE"
    HTTP = "HTTP"
    DYNAMODB = "AMAZON_DYNAMODB"
    LAMBDA = "AWS_LAMBDA"
    RDS = "RELATIONAL_DATABASE"
    EVENTBRIDGE = "AMAZON_EVENTBRIDGE"
    OPENSEARCH = "AMAZON_OPENSEARCH_SERVICE"


class ResolverKind(str, Enum):
    """Resolver kinds."""

    UNIT = "UNIT"
    """Single-step resolver bound to one data source."""

    PIPELINE = "PIPELINE"
    """Ordered chain of functions wrapped by a pipeline resolver."""


class ScanEntry(BaseModel):
    """One file or directory found under a scan root.

    Immutable once produced by the DirectoryScanner.

    Example:
        >>> entry = ScanEntry(
        ...     relative_path="Query.getUser/1.fetch.[users].ts",
        ...     name="1.fetch.[users].ts",
        ...     is_directory=False,
        ...     path=Path("/api/resolvers/Query.getUser/1.fetch.[users].ts"),
        ... )
        >>> entry.parent
        'Query.getUser'
    """

    model_config = ConfigDict(frozen=True)

    relative_path: str = Field(description="POSIX path relative to the scan root.")
    name: str = Field(description="Base name of the entry.")
    is_directory: bool = Field(description="Whether the entry is a directory.")
    path: Path = Field(description="Absolute path of the entry.")

    @property
    def parent(self) -> str:
        """Relative path of the containing directory ('' for root children)."""
        head, _, _ = self.relative_path.rpartition("/")
        return head

    @property
    def is_file(self) -> bool:
        return not self.is_directory


class FieldKey(BaseModel):
    """Identifier of a schema field's resolver slot.

    Case-sensitive and hashable, used directly as a mapping key.
    """

    model_config = ConfigDict(frozen=True)

    type_name: str
    field_name: str

    def __str__(self) -> str:
        return f"{self.type_name}.{self.field_name}"


class UnitResolverDescriptor(BaseModel):
    """A single-step resolver file bound to exactly one data source."""

    model_config = ConfigDict(frozen=True)

    field_key: FieldKey
    data_source_name: str
    entry_path: Path


class PipelineDirectoryDescriptor(BaseModel):
    """A ``Type.field`` directory holding pipeline stages."""

    model_config = ConfigDict(frozen=True)

    field_key: FieldKey
    entry_path: Path
    relative_path: str = ""


class StageDescriptor(BaseModel):
    """One function in a pipeline.

    ``order`` is the sort key; ties keep insertion order.
    """

    model_config = ConfigDict(frozen=True)

    field_key: FieldKey
    order: int = Field(ge=0)
    stage_name: str
    data_source_name: str
    entry_path: Path


class WrapperDescriptor(BaseModel):
    """The ``resolver.ts|js`` file wrapping a pipeline's stage chain."""

    model_config = ConfigDict(frozen=True)

    field_key: FieldKey
    entry_path: Path


class FlatResolverDescriptor(BaseModel):
    """A ``Type.field.ts|js`` file found by bulk resolver loading."""

    model_config = ConfigDict(frozen=True)

    field_key: FieldKey
    entry_path: Path


class BundlingOptions(BaseModel):
    """Options passed to the bundler.

    Example:
        >>> BundlingOptions(exclude_source_map=True).model_dump()
        {'exclude_source_map': True}
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    exclude_source_map: bool = Field(
        default=False,
        description="Do not embed inline source maps in the produced artifact.",
    )


class LogContext(BaseModel):
    """Structured logging context.

    Example:
        >>> context = LogContext(api_id="blog", data_source="users")
        >>> log_info("Loading resolvers", context)
    """

    api_id: str | None = Field(default=None, description="API construct id.")
    data_source: str | None = Field(default=None, description="Data source name.")
    type_name: str | None = Field(default=None, description="Schema type name.")
    field_name: str | None = Field(default=None, description="Schema field name.")
    operation: str | None = Field(default=None, description="Operation being performed.")


__all__ = [
    "BundlingOptions",
    "DataSourceKind",
    "FieldKey",
    "FlatResolverDescriptor",
    "LogContext",
    "PipelineDirectoryDescriptor",
    "ResolverKind",
    "ScanEntry",
    "StageDescriptor",
    "UnitResolverDescriptor",
    "WrapperDescriptor",
]
