"""Filename conventions for resolver discovery.

Pure parsing of file and directory names into tokens. No I/O.

| Pattern                                   | Matches          |
|-------------------------------------------|------------------|
| ``Type.field.[dataSource].ts|js``         | unit resolver    |
| ``Type.field/`` (directory)               | pipeline field   |
| ``Type.field/resolver.ts|js``             | pipeline wrapper |
| ``Type.field/NNN.stage.[dataSource].ts|js`` | pipeline stage |
| ``Type.field.ts|js`` (bulk loading)       | flat resolver    |

Names that do not match return None; they are skipped, not errors, so
non-handler files can live next to resolvers.

Example:
    >>> parse_unit_resolver_file("Query.getUser.[users].ts")
    UnitResolverToken(type_name='Query', field_name='getUser', data_source_name='users')
    >>> parse_stage_file("2.format.[users].js")
    StageToken(order=2, stage_name='format', data_source_name='users')
    >>> parse_unit_resolver_file("Query.getUser.[users].md") is None
    True
"""

from __future__ import annotations

import re
from dataclasses import dataclass

SOURCE_EXTENSIONS = ("ts", "js")
WRAPPER_NAME = "resolver"

_NAME = r"[_A-Za-z][_0-9A-Za-z]*"
_EXT = r"(?:ts|js)"

UNIT_RESOLVER_PATTERN = re.compile(
    rf"^(?P<type_name>{_NAME})\.(?P<field_name>{_NAME})\.\[(?P<data_source>\w+)\]\.{_EXT}$"
)
PIPELINE_DIRECTORY_PATTERN = re.compile(rf"^(?P<type_name>{_NAME})\.(?P<field_name>{_NAME})$")
STAGE_PATTERN = re.compile(
    rf"^(?P<order>\d+)\.(?P<stage_name>{_NAME})\.\[(?P<data_source>\w+)\]\.{_EXT}$"
)
WRAPPER_PATTERN = re.compile(rf"^{WRAPPER_NAME}\.{_EXT}$")
FLAT_RESOLVER_PATTERN = re.compile(rf"^(?P<type_name>{_NAME})\.(?P<field_name>{_NAME})\.{_EXT}$")
SOURCE_EXTENSION_PATTERN = re.compile(rf"\.{_EXT}$")
ANY_EXTENSION_PATTERN = re.compile(r"\.\w+$")


@dataclass(frozen=True)
class FieldToken:
    type_name: str
    field_name: str


@dataclass(frozen=True)
class UnitResolverToken:
    type_name: str
    field_name: str
    data_source_name: str


@dataclass(frozen=True)
class StageToken:
    order: int
    stage_name: str
    data_source_name: str


def parse_unit_resolver_file(name: str) -> UnitResolverToken | None:
    """Parse ``Type.field.[dataSource].ts|js``."""
    match = UNIT_RESOLVER_PATTERN.match(name)
    if match is None:
        return None
    return UnitResolverToken(
        type_name=match["type_name"],
        field_name=match["field_name"],
        data_source_name=match["data_source"],
    )


def parse_pipeline_directory(name: str) -> FieldToken | None:
    """Parse a ``Type.field`` directory name."""
    match = PIPELINE_DIRECTORY_PATTERN.match(name)
    if match is None:
        return None
    return FieldToken(type_name=match["type_name"], field_name=match["field_name"])


def parse_stage_file(name: str) -> StageToken | None:
    """Parse ``NNN.stage.[dataSource].ts|js``; ``NNN`` becomes the integer order."""
    match = STAGE_PATTERN.match(name)
    if match is None:
        return None
    return StageToken(
        order=int(match["order"]),
        stage_name=match["stage_name"],
        data_source_name=match["data_source"],
    )


def is_wrapper_file(name: str) -> bool:
    """Check for the ``resolver.ts|js`` pipeline wrapper."""
    return WRAPPER_PATTERN.match(name) is not None


def parse_flat_resolver_file(name: str) -> FieldToken | None:
    """Parse ``Type.field.ts|js`` as used by bulk resolver loading."""
    match = FLAT_RESOLVER_PATTERN.match(name)
    if match is None:
        return None
    return FieldToken(type_name=match["type_name"], field_name=match["field_name"])


def has_source_extension(path: str) -> bool:
    """True when ``path`` ends in ``.ts`` or ``.js``."""
    return SOURCE_EXTENSION_PATTERN.search(path) is not None


def has_any_extension(name: str) -> bool:
    return ANY_EXTENSION_PATTERN.search(name) is not None


__all__ = [
    "SOURCE_EXTENSIONS",
    "FieldToken",
    "StageToken",
    "UnitResolverToken",
    "has_any_extension",
    "has_source_extension",
    "is_wrapper_file",
    "parse_flat_resolver_file",
    "parse_pipeline_directory",
    "parse_stage_file",
    "parse_unit_resolver_file",
]
