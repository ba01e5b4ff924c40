"""Entry file resolution for explicitly created resolvers and functions.

These lookups bypass convention discovery. The search order for a unit
resolver is:

1. The given ``entry_file``
2. ``<entry_dir>/<Type>.<field>.ts``
3. ``<entry_dir>/<Type>.<field>.js``

Function lookups follow the same order with ``<name>`` instead of
``<Type>.<field>``; ``name`` may already carry its extension.
"""

from __future__ import annotations

from pathlib import Path

from . import grammar
from .exceptions import (
    ConflictingOptionsError,
    DirectoryNotFoundError,
    EntryFileNotFoundError,
    InvalidExtensionError,
)
from .logging import log_debug
from .types import FieldKey, FlatResolverDescriptor


def check_exclusive(entry_file: str | Path | None, entry_dir: str | Path | None) -> None:
    """Reject ``entry_file`` and ``entry_dir`` given together.

    Raises:
        ConflictingOptionsError: If both are given.
    """
    if entry_file is not None and entry_dir is not None:
        raise ConflictingOptionsError(
            "Only one of entry_file or entry_dir is allowed.",
            metadata={"entry_file": str(entry_file), "entry_dir": str(entry_dir)},
        )


def check_entry_file(entry_file: str | Path, kind: str = "resolver") -> Path:
    """Validate an explicitly given entry file.

    The extension is checked before the file system is touched.

    Raises:
        InvalidExtensionError: If the file is not .ts or .js.
        EntryFileNotFoundError: If the file does not exist.
    """
    path = Path(entry_file)
    if not grammar.has_source_extension(str(path)):
        raise InvalidExtensionError(
            "Only JavaScript or TypeScript files are supported.",
            metadata={"entry_file": str(path)},
        )
    if not path.is_file():
        raise EntryFileNotFoundError(
            f"Cannot find {kind} file at {path}",
            attempted=[str(path)],
        )
    return path


def find_resolver_entry(
    type_name: str,
    field_name: str,
    entry_file: str | Path | None = None,
    entry_dir: str | Path | None = None,
) -> Path:
    """Find the entry file of a unit or pipeline resolver.

    Args:
        type_name: Schema type name.
        field_name: Schema field name.
        entry_file: Explicit file, used as-is when given.
        entry_dir: Directory holding ``Type.field.ts|js``.

    Returns:
        Path to the entry file.

    Raises:
        ConflictingOptionsError: If both entry_file and entry_dir are given.
        InvalidExtensionError: If entry_file is not .ts or .js.
        EntryFileNotFoundError: If nothing was found; names every attempt.
    """
    check_exclusive(entry_file, entry_dir)
    if entry_file is not None:
        return check_entry_file(entry_file, "resolver")

    if entry_dir is None:
        raise ValueError("One of entry_file or entry_dir is required")

    return _first_existing(Path(entry_dir), f"{type_name}.{field_name}", "resolver")


def find_function_entry(
    name: str,
    entry_file: str | Path | None = None,
    entry_dir: str | Path | None = None,
) -> Path:
    """Find the entry file of a pipeline function.

    Args:
        name: Function name, optionally with a ``.ts``/``.js`` extension.
        entry_file: Explicit file, used as-is when given.
        entry_dir: Directory holding ``<name>.ts|js``.

    Raises:
        ConflictingOptionsError: If both entry_file and entry_dir are given.
        InvalidExtensionError: If entry_file or name has a foreign extension.
        EntryFileNotFoundError: If nothing was found; names every attempt.
    """
    check_exclusive(entry_file, entry_dir)
    if entry_file is not None:
        return check_entry_file(entry_file, "function")

    if entry_dir is None:
        raise ValueError("One of entry_file or entry_dir is required")

    if grammar.has_any_extension(name):
        if not grammar.has_source_extension(name):
            raise InvalidExtensionError(
                "Only JavaScript or TypeScript files are supported.",
                metadata={"name": name},
            )
        path = Path(entry_dir) / name
        if path.is_file():
            return path
        raise EntryFileNotFoundError(f"Cannot find function file {path}.", attempted=[str(path)])

    return _first_existing(Path(entry_dir), name, "function")


def find_resolver_entries(entry_dir: str | Path) -> list[FlatResolverDescriptor]:
    """List ``Type.field.ts|js`` files directly inside ``entry_dir``.

    Raises:
        DirectoryNotFoundError: If entry_dir does not exist.
    """
    directory = Path(entry_dir)
    if not directory.is_dir():
        raise DirectoryNotFoundError(
            f"Cannot find resolver directory at {directory}",
            metadata={"path": str(directory)},
        )

    descriptors: list[FlatResolverDescriptor] = []
    for path in sorted(directory.iterdir(), key=lambda p: p.name):
        if not path.is_file():
            continue
        token = grammar.parse_flat_resolver_file(path.name)
        if token is None:
            continue
        descriptors.append(
            FlatResolverDescriptor(
                field_key=FieldKey(type_name=token.type_name, field_name=token.field_name),
                entry_path=path,
            )
        )

    log_debug(f"Found {len(descriptors)} resolver entries in {directory}")
    return descriptors


def _first_existing(directory: Path, stem: str, kind: str) -> Path:
    attempted: list[str] = []
    for extension in grammar.SOURCE_EXTENSIONS:
        candidate = directory / f"{stem}.{extension}"
        if candidate.is_file():
            return candidate
        attempted.append(str(candidate))

    raise EntryFileNotFoundError(
        f"Cannot find {kind} file {attempted[0]}, or {attempted[1]}.",
        attempted=attempted,
    )


__all__ = [
    "check_entry_file",
    "check_exclusive",
    "find_function_entry",
    "find_resolver_entries",
    "find_resolver_entry",
]
