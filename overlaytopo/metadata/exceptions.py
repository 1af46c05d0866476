"""Exception hierarchy for metadata service access."""


class MetadataError(Exception):
    """Base exception for all metadata service errors."""


class MetadataConnectionError(MetadataError):
    """The metadata service could not be reached."""


class MetadataAPIError(MetadataError):
    """A metadata request returned an error status or an unusable payload."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class MetadataTimeoutError(MetadataError):
    """The metadata service did not become ready in time."""
