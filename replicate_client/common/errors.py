"""Error taxonomy shared by every resource client.

Each failure a caller can see is a ``ReplicateError`` subclass, so a single
``except ReplicateError`` covers the whole client surface while specific
kinds stay distinguishable.

Status mapping for non-2xx responses
- 401 -> ``InvalidCredentialsError``
- 402 -> ``PaymentNeededError``
- 404 -> ``NotFoundError`` (a ``MiscError``)
- anything else -> ``MiscError``

The service reports problems as ``{"title": ..., "detail": ...}``; when the
body has that shape the message becomes ``"title: detail"``.
"""

import json
from typing import Any, Optional, Tuple

import structlog

logger = structlog.get_logger("errors")

DETAILS_UNAVAILABLE = "error details not available"


class ReplicateError(Exception):
    """Base class for all client errors."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        title: Optional[str] = None,
        detail: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.title = title
        self.detail = detail

    def __str__(self) -> str:
        return self.message


class MissingCredentialsError(ReplicateError):
    """No API token is configured."""


class InvalidCredentialsError(ReplicateError):
    """The service rejected the API token (HTTP 401)."""


class PaymentNeededError(ReplicateError):
    """Quota or billing problem (HTTP 402)."""


class InvalidRequestError(ReplicateError):
    """The caller asked for something the current state cannot provide."""


class SerializationError(ReplicateError):
    """A response body did not match the expected JSON shape."""


class ClientError(ReplicateError):
    """Transport-level failure: connection refused, timeout, TLS."""


class MiscError(ReplicateError):
    """Any other non-2xx response."""


class NotFoundError(MiscError):
    """The addressed resource does not exist."""


def _parse_error_body(body: Any) -> Optional[Tuple[str, str]]:
    """Extract ``(title, detail)`` from an error body, or ``None``."""
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except ValueError:
            return None
    if not isinstance(body, dict):
        return None

    title = body.get("title")
    detail = body.get("detail")
    if not isinstance(title, str) or not isinstance(detail, str):
        return None
    return title, detail


def get_error(status_code: int, body: Any) -> ReplicateError:
    """Map a non-2xx response to a typed error.

    Parameters
    - status_code: HTTP status of the response
    - body: Raw response body (``bytes``/``str``) or already-decoded JSON

    Returns
    - An error instance; the caller decides whether to raise it
    """
    if status_code == 402:
        error_class = PaymentNeededError
    elif status_code == 401:
        error_class = InvalidCredentialsError
    elif status_code == 404:
        error_class = NotFoundError
    else:
        error_class = MiscError

    parsed = _parse_error_body(body)
    if parsed is None:
        logger.debug("Unparseable error body", status_code=status_code)
        return error_class(DETAILS_UNAVAILABLE, status_code=status_code)

    title, detail = parsed
    return error_class(
        f"{title}: {detail}",
        status_code=status_code,
        title=title,
        detail=detail,
    )
