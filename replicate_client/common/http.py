"""Authenticated HTTP transport shared by all resource clients.

Wraps a single ``httpx.AsyncClient`` and gives every call the same
discipline:

- the API token is resolved before any I/O, so a missing key never reaches
  the network
- every request carries ``Authorization: Token <key>``
- transport failures become ``ClientError``
- unexpected statuses are mapped through ``get_error``
- bodies are decoded as JSON; malformed bodies become ``SerializationError``

Timeouts are a transport concern: the client is built with
``config.replicate_timeout`` and a timeout surfaces as ``ClientError``.
"""

import time
from typing import Any, Dict, Iterable, Optional, Type, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from .config import ReplicateConfig
from .errors import ClientError, SerializationError, get_error
from .metrics import ClientMetrics

logger = structlog.get_logger("http")

RecordT = TypeVar("RecordT", bound=BaseModel)

EVENT_STREAM = "text/event-stream"


def parse_record(schema: Type[RecordT], data: Any) -> RecordT:
    """Validate decoded JSON into a record, raising ``SerializationError``."""
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise SerializationError(
            f"Unexpected {schema.__name__} payload: {e.error_count()} validation error(s)"
        ) from e


class ReplicateHTTPClient:
    """Authenticated request/response and streaming calls.

    Parameters
    - config: Resolved ``ReplicateConfig`` (token, base URL, timeout)
    - client: Optional pre-built ``httpx.AsyncClient``; when given, the caller
      keeps ownership and ``aclose`` leaves it open
    - metrics: Optional ``ClientMetrics``; a private collector by default
    """

    def __init__(
        self,
        config: ReplicateConfig,
        client: Optional[httpx.AsyncClient] = None,
        metrics: Optional[ClientMetrics] = None,
    ):
        self.config = config
        self.metrics = metrics or ClientMetrics()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=config.replicate_timeout)

    async def __aenter__(self) -> "ReplicateHTTPClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying client if this instance created it."""
        if self._owns_client:
            await self.client.aclose()

    def url(self, path: str) -> str:
        """Resolve ``path`` against the base URL.

        Absolute URLs handed out by the service (``urls.get``, cursors) are
        used verbatim.
        """
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.config.get_base_url()}/{path.lstrip('/')}"

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {"Authorization": f"Token {self.config.get_api_key()}"}
        if extra:
            headers.update(extra)
        return headers

    async def request(
        self,
        method: str,
        path: str,
        operation: str,
        json: Any = None,
        expected: Iterable[int] = (200,),
    ) -> Any:
        """Send one authenticated request and return the decoded JSON body.

        Parameters
        - method: HTTP verb
        - path: Path relative to the base URL, or an absolute URL
        - operation: Stable name used for logs and metric labels
        - json: Optional request body
        - expected: Status codes treated as success

        Returns
        - Decoded JSON, or ``None`` for an empty success body
        """
        headers = self._headers()
        url = self.url(path)

        start_time = time.time()
        try:
            response = await self.client.request(method, url, headers=headers, json=json)
        except httpx.HTTPError as e:
            self.metrics.record_request(method, operation, "error", time.time() - start_time)
            logger.error("Request failed", operation=operation, error=str(e))
            raise ClientError(str(e) or type(e).__name__) from e

        self.metrics.record_request(
            method, operation, str(response.status_code), time.time() - start_time
        )

        if response.status_code not in tuple(expected):
            error = get_error(response.status_code, response.content)
            logger.warning(
                "Request rejected",
                operation=operation,
                status_code=response.status_code,
                error=str(error)
            )
            raise error

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise SerializationError(f"Response for {operation} is not valid JSON: {e}") from e

    async def open_stream(self, path: str, operation: str) -> httpx.Response:
        """Open a server-sent event stream and return the live response.

        The response body is not read; the caller owns it and must close it
        with ``aclose()``. Non-2xx responses are read, closed, and raised as
        typed errors.
        """
        headers = self._headers({"Accept": EVENT_STREAM, "Cache-Control": "no-store"})
        request = self.client.build_request("GET", self.url(path), headers=headers)

        start_time = time.time()
        try:
            response = await self.client.send(request, stream=True)
        except httpx.HTTPError as e:
            self.metrics.record_request("GET", operation, "error", time.time() - start_time)
            logger.error("Stream request failed", operation=operation, error=str(e))
            raise ClientError(str(e) or type(e).__name__) from e

        self.metrics.record_request(
            "GET", operation, str(response.status_code), time.time() - start_time
        )

        if response.is_success:
            return response

        try:
            body = await response.aread()
        except httpx.HTTPError as e:
            raise ClientError(str(e) or type(e).__name__) from e
        finally:
            await response.aclose()

        error = get_error(response.status_code, body)
        logger.warning(
            "Stream request rejected",
            operation=operation,
            status_code=response.status_code,
            error=str(error)
        )
        raise error
