"""Custom exceptions for appsync-router.

This module provides the error hierarchy raised while discovering and
assembling resolvers. Every error is fatal for the registration call that
raised it; nothing is retried internally.

Example:
    >>> from appsync_router.exceptions import RouterError
    >>>
    >>> try:
    ...     router.add_none_data_source("users")
    ... except RouterError as e:
    ...     print(e.to_dict())
"""

from __future__ import annotations

from typing import Any


class RouterError(Exception):
    """Base exception for all appsync-router errors.

    Attributes:
        message: Human-readable error message
        metadata: Additional error context (paths, names, ...)
    """

    def __init__(self, message: str, *, metadata: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.metadata = metadata or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary for structured logging.

        Returns:
            Dictionary with error details
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "metadata": self.metadata,
        }


class DirectoryNotFoundError(RouterError):
    """Raised when a discovery root or resolver directory does not exist.

    Example:
        >>> raise DirectoryNotFoundError("Cannot find resolver directory at ./api/resolvers")
    """

    pass


class EntryFileNotFoundError(RouterError):
    """Raised when an explicit or derived entry file does not exist.

    The message names every path that was attempted.
    """

    def __init__(self, message: str, *, attempted: list[str] | None = None) -> None:
        super().__init__(message, metadata={"attempted": attempted or []})
        self.attempted = attempted or []


class InvalidExtensionError(RouterError):
    """Raised when an explicit entry file is not a JavaScript or TypeScript file."""

    pass


class ConflictingOptionsError(RouterError):
    """Raised when mutually exclusive options are given together.

    Example:
        >>> router.create_js_resolver(ds, "Query", "getUser",
        ...     entry_file="a.ts", entry_dir="resolvers")
        Traceback (most recent call last):
        ConflictingOptionsError: Only one of entry_file or entry_dir is allowed.
    """

    pass


class AmbiguousOriginError(RouterError):
    """Raised when the defining file cannot be inferred from the call stack.

    Pass an explicit ``base_dir`` to avoid relying on stack inspection.
    """

    pass


class DuplicateUnitResolverError(RouterError):
    """Raised when a second unit resolver claims an already resolved field."""

    pass


class DuplicateStageError(RouterError):
    """Raised when pipeline stages collide on order or name for a data source."""

    pass


class DuplicateResourceError(RouterError):
    """Raised when a resource identifier is already taken in the resource graph."""

    pass


class DuplicateDataSourceError(DuplicateResourceError):
    """Raised when a data source name is registered twice."""

    pass


class UnknownDataSourceError(RouterError):
    """Raised when a resolver or function names a data source that is not registered."""

    pass


class BundlingError(RouterError):
    """Raised when the bundler fails to produce a code artifact.

    Carries the captured process output when available.
    """

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        super().__init__(
            message,
            metadata={"returncode": returncode, "stdout": stdout, "stderr": stderr},
        )
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class ConfigurationError(RouterError):
    """Raised when a router configuration file is missing or invalid."""

    pass


__all__ = [
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
]
