"""One-time recursive listing of a resolver directory.

The snapshot is taken once per API root. Later data source registrations
reuse it, so files added to disk after construction are never picked up.
"""

from __future__ import annotations

from pathlib import Path

from .exceptions import DirectoryNotFoundError
from .logging import log_debug
from .types import ScanEntry


class DirectoryScanner:
    """Produces an immutable, ordered snapshot of a directory tree.

    Entries are listed depth-first with siblings sorted by name, so two
    scans of an unchanged tree are equal.

    Example:
        >>> entries = DirectoryScanner.scan(Path("api/resolvers"))
        >>> [e.relative_path for e in entries]
        ['Query.getUser', 'Query.getUser/1.fetch.[users].ts', 'Query.listUsers.[users].ts']
    """

    @staticmethod
    def scan(root: Path | str) -> tuple[ScanEntry, ...]:
        """Scan ``root`` recursively.

        Args:
            root: Directory to scan.

        Returns:
            Every file and directory below root, at every depth.

        Raises:
            DirectoryNotFoundError: If root does not exist or is not a directory.
        """
        root = Path(root)
        if not root.is_dir():
            raise DirectoryNotFoundError(
                f"Cannot find resolver directory at {root}",
                metadata={"path": str(root)},
            )

        root = root.resolve()
        entries: list[ScanEntry] = []
        DirectoryScanner._walk(root, root, entries)

        log_debug(f"Scanned {len(entries)} entries in {root}")
        return tuple(entries)

    @staticmethod
    def _walk(root: Path, directory: Path, entries: list[ScanEntry]) -> None:
        for child in sorted(directory.iterdir(), key=lambda p: p.name):
            is_directory = child.is_dir()
            entries.append(
                ScanEntry(
                    relative_path=child.relative_to(root).as_posix(),
                    name=child.name,
                    is_directory=is_directory,
                    path=child,
                )
            )
            if is_directory:
                DirectoryScanner._walk(root, child, entries)


__all__ = ["DirectoryScanner"]
