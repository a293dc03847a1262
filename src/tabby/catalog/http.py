# ABOUTME: HTTP client abstraction for the recognition and search services.
# ABOUTME: Provides single-attempt requests and injectable transport for testing.

import logging
from typing import Any, Protocol, runtime_checkable

import httpx

from tabby.catalog.errors import MalformedResponseError, ScanFetchError
from tabby.config import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

OCTET_STREAM = "application/octet-stream"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for the two request shapes the scan workflow needs."""

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]: ...

    def post_bytes(
        self, url: str, data: bytes, params: dict[str, str] | None = None
    ) -> dict[str, Any]: ...


class TabbyHttpClient:
    """HTTP client for the scan and search APIs.

    Wraps httpx.Client with a shared timeout and User-Agent. Every request
    is a single attempt: a failed upload or search is reported to the user
    rather than retried behind their back.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        client_kwargs: dict[str, Any] = {
            "headers": {"User-Agent": "tabby/0.1.0"},
            "timeout": timeout,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.Client(**client_kwargs)

    def __enter__(self) -> "TabbyHttpClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        """Send a GET request and return the parsed JSON body.

        Raises:
            ScanFetchError: On transport errors or non-2xx responses.
            MalformedResponseError: If the body is not a JSON object.
        """
        return self._send("GET", url, params=params)

    def post_bytes(
        self, url: str, data: bytes, params: dict[str, str] | None = None
    ) -> dict[str, Any]:
        """POST a raw binary payload and return the parsed JSON body.

        Raises:
            ScanFetchError: On transport errors or non-2xx responses.
            MalformedResponseError: If the body is not a JSON object.
        """
        return self._send(
            "POST",
            url,
            params=params,
            content=data,
            headers={"Content-Type": OCTET_STREAM},
        )

    def _send(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise ScanFetchError(f"Request failed: {url}: {exc}") from exc

        if not response.is_success:
            body = response.text
            logger.error("HTTP %d from %s: %s", response.status_code, url, body)
            raise ScanFetchError(
                f"HTTP {response.status_code} from {url}",
                status=response.status_code,
                body=body,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedResponseError(f"Invalid JSON from {url}: {exc}") from exc
        if not isinstance(payload, dict):
            raise MalformedResponseError(
                f"Expected a JSON object from {url}, got {type(payload).__name__}"
            )
        return payload
