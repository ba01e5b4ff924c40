"""Exception hierarchy and logging tests.

These tests verify:
- RouterError is the base exception class
- Errors carry metadata and render to dicts
- Logging helpers render structured fields
"""

from __future__ import annotations

import logging

import pytest

from appsync_router import (
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
    LogContext,
    RouterError,
    UnknownDataSourceError,
    configure_logging,
    log_debug,
    log_error,
    log_info,
    log_trace,
    log_warn,
    set_log_level,
)


@pytest.fixture
def router_logger():
    """Provide the package logger and restore its level afterwards."""
    logger = logging.getLogger("appsync_router")
    level = logger.level
    yield logger
    logger.setLevel(level)


class TestExceptionHierarchy:
    """Test exception class hierarchy."""

    def test_router_error_is_base(self):
        """Test RouterError is the base class."""
        for exc_class in [
            DirectoryNotFoundError,
            EntryFileNotFoundError,
            InvalidExtensionError,
            ConflictingOptionsError,
            AmbiguousOriginError,
            DuplicateUnitResolverError,
            DuplicateStageError,
            DuplicateResourceError,
            DuplicateDataSourceError,
            UnknownDataSourceError,
            BundlingError,
            ConfigurationError,
        ]:
            assert issubclass(exc_class, RouterError)

    def test_duplicate_data_source_is_duplicate_resource(self):
        with pytest.raises(DuplicateResourceError):
            raise DuplicateDataSourceError("Data source 'users' is already registered")

    def test_to_dict(self):
        """Test errors render for structured logging."""
        error = DuplicateStageError("two stages", metadata={"order": 1})

        assert error.to_dict() == {
            "error_type": "DuplicateStageError",
            "message": "two stages",
            "metadata": {"order": 1},
        }
        assert str(error) == "two stages"

    def test_entry_file_not_found_attempts(self):
        error = EntryFileNotFoundError("not found", attempted=["a.ts", "a.js"])

        assert error.attempted == ["a.ts", "a.js"]
        assert error.metadata == {"attempted": ["a.ts", "a.js"]}

    def test_bundling_error_output(self):
        error = BundlingError("failed", returncode=1, stdout="out", stderr="err")

        assert (error.returncode, error.stdout, error.stderr) == (1, "out", "err")
        assert error.to_dict()["metadata"]["stderr"] == "err"


class TestLogging:
    """Test logging functions."""

    def test_fields_rendered(self, caplog: pytest.LogCaptureFixture):
        """Test fields are appended to the message and kept on the record."""
        with caplog.at_level(logging.INFO, logger="appsync_router"):
            log_info("Registered data source", {"data_source": "users", "count": 2})

        record = caplog.records[-1]
        assert record.getMessage() == "Registered data source [data_source=users count=2]"
        assert record.fields == {"data_source": "users", "count": "2"}

    def test_log_context_drops_empty_values(self, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.ERROR, logger="appsync_router"):
            log_error("Failed", LogContext(api_id="blog", operation="scan"))

        assert caplog.records[-1].fields == {"api_id": "blog", "operation": "scan"}

    def test_levels(self, caplog: pytest.LogCaptureFixture):
        """Test each helper logs at its own level."""
        with caplog.at_level(5, logger="appsync_router"):
            log_trace("trace")
            log_debug("debug")
            log_info("info")
            log_warn("warn")
            log_error("error")

        assert [r.levelname for r in caplog.records] == [
            "TRACE",
            "DEBUG",
            "INFO",
            "WARNING",
            "ERROR",
        ]

    def test_disabled_level_skipped(self, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.WARNING, logger="appsync_router"):
            log_debug("hidden", {"key": "value"})

        assert caplog.records == []

    def test_set_log_level(self, router_logger: logging.Logger):
        set_log_level("warn")
        assert router_logger.level == logging.WARNING

        set_log_level("TRACE")
        assert router_logger.level == 5

    def test_set_log_level_unknown(self):
        with pytest.raises(ValueError):
            set_log_level("loud")

    def test_configure_logging_callable(self):
        """Test configure_logging accepts names and ints without raising."""
        configure_logging(level="debug")
        configure_logging(level=logging.INFO)
