"""Tests for metadata exception hierarchy."""

from overlaytopo.metadata.exceptions import (
    MetadataAPIError,
    MetadataConnectionError,
    MetadataError,
    MetadataTimeoutError,
)


class TestExceptionHierarchy:
    """Test exception inheritance and structure."""

    def test_metadata_error_inherits_from_exception(self):
        """MetadataError should inherit from Exception."""
        assert issubclass(MetadataError, Exception)
        assert str(MetadataError("test")) == "test"

    def test_subclasses(self):
        """All specific errors are MetadataErrors."""
        for cls in (MetadataConnectionError, MetadataAPIError, MetadataTimeoutError):
            assert issubclass(cls, MetadataError)
            assert isinstance(cls("x"), MetadataError)


class TestMetadataAPIError:
    """Test MetadataAPIError specific functionality."""

    def test_with_status_code(self):
        exc = MetadataAPIError("failed", status_code=404)
        assert exc.status_code == 404
        assert str(exc) == "failed"

    def test_without_status_code(self):
        assert MetadataAPIError("failed").status_code is None
