"""Tests for datacollections/exceptions.py"""

from datacollections.exceptions import (
    ConfigError,
    DatabaseError,
    DataCollectionsError,
    EmptyUploadError,
    IngestError,
    MaintenanceError,
    StoreConnectionError,
    UnsupportedFileError,
)


class TestExceptionHierarchy:
    """Test exception inheritance."""

    def test_all_inherit_from_base_error(self):
        for exc_type in (ConfigError, DatabaseError, IngestError, MaintenanceError):
            assert issubclass(exc_type, DataCollectionsError)

    def test_store_connection_is_database_error(self):
        assert issubclass(StoreConnectionError, DatabaseError)

    def test_upload_errors_are_ingest_errors(self):
        assert issubclass(UnsupportedFileError, IngestError)
        assert issubclass(EmptyUploadError, IngestError)

    def test_base_error_is_exception(self):
        assert issubclass(DataCollectionsError, Exception)


class TestExceptionMessages:
    def test_exception_message_preserved(self):
        msg = "Test error message"
        assert str(MaintenanceError(msg)) == msg
        assert str(StoreConnectionError(msg)) == msg
