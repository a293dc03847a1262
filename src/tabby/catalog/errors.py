# ABOUTME: Exception hierarchy for the scan and search stages.
# ABOUTME: Library code raises these; the scan workflow turns them into user alerts.


class TabbyError(Exception):
    """Base class for all Tabby errors."""


class ScanFetchError(TabbyError):
    """Raised when a request to the recognition or search service fails.

    ``status`` is None for transport-level failures (connection refused,
    timeouts); ``body`` holds the response text for HTTP failures.
    """

    def __init__(self, message: str, *, status: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class RecognitionError(ScanFetchError):
    """The scan_cover / scan_shelf endpoint failed."""


class SearchError(ScanFetchError):
    """The books/search endpoint failed."""


class MalformedResponseError(TabbyError):
    """A response body was not JSON or did not have the expected shape."""


class ImageReadError(TabbyError):
    """The image to upload could not be read."""


class ImagePermissionError(ImageReadError):
    """Access to the image was refused."""


class IngestionBusyError(TabbyError):
    """A submission of the same scan mode is already in flight."""


class HandoffNotReadyError(TabbyError):
    """The selection UI did not acknowledge the choosing state."""
