# ABOUTME: Image ingestion stage: reads a local image and uploads it for recognition.
# ABOUTME: Posts raw bytes to scan_cover or scan_shelf and guards against duplicate submissions.

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from tabby.catalog.errors import (
    ImagePermissionError,
    ImageReadError,
    IngestionBusyError,
    RecognitionError,
    ScanFetchError,
)
from tabby.catalog.http import HttpClient
from tabby.catalog.types import ScanMode

logger = logging.getLogger(__name__)

# Server-side search stays enabled; candidates are still resolved client-side.
_SCAN_PARAMS = {"nosearch": "false"}


class ImageIngestion:
    """Uploads book images to the recognition service.

    Holds one processing flag per scan mode: while an upload of a mode is in
    flight, a second upload of the same mode is refused.
    """

    def __init__(self, http_client: HttpClient, gpu_url: str) -> None:
        self._http = http_client
        self._gpu_url = gpu_url.rstrip("/")
        self._in_flight: set[ScanMode] = set()

    def endpoint(self, mode: ScanMode) -> str:
        return f"{self._gpu_url}/books/{mode.value}"

    def is_processing(self, mode: ScanMode) -> bool:
        return mode in self._in_flight

    @staticmethod
    def read_image(path: Path) -> bytes:
        """Read an image file into a byte payload.

        Raises:
            ImagePermissionError: If the file cannot be opened for lack of access.
            ImageReadError: If the file is missing, unreadable, or empty.
        """
        try:
            payload = path.read_bytes()
        except PermissionError as exc:
            raise ImagePermissionError(f"Permission denied: {path}") from exc
        except OSError as exc:
            raise ImageReadError(f"Cannot read image {path}: {exc}") from exc

        if not payload:
            raise ImageReadError(f"Image is empty: {path}")
        return payload

    def submit(self, payload: bytes, mode: ScanMode) -> dict[str, Any]:
        """Upload an image payload to the recognition endpoint for ``mode``.

        Returns:
            Parsed JSON from the recognition service.

        Raises:
            IngestionBusyError: If an upload of the same mode is in flight.
            RecognitionError: On transport errors or non-2xx responses.
        """
        url = self.endpoint(mode)
        with self._processing(mode):
            logger.info("Uploading %d byte image to %s", len(payload), url)
            try:
                return self._http.post_bytes(url, payload, params=dict(_SCAN_PARAMS))
            except ScanFetchError as exc:
                raise RecognitionError(str(exc), status=exc.status, body=exc.body) from exc

    def scan(self, path: Path, mode: ScanMode) -> dict[str, Any]:
        """Read the image at ``path`` and submit it for recognition."""
        if self.is_processing(mode):
            raise IngestionBusyError(f"A {mode.value} upload is already in progress")
        return self.submit(self.read_image(path), mode)

    @contextmanager
    def _processing(self, mode: ScanMode) -> Iterator[None]:
        if mode in self._in_flight:
            raise IngestionBusyError(f"A {mode.value} upload is already in progress")
        self._in_flight.add(mode)
        try:
            yield
        finally:
            self._in_flight.discard(mode)
