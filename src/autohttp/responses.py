"""Response primitives and error translation."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

import msgspec

from .exceptions import HTTPError
from .http import Status, is_server_error
from .serialization import json_encode

logger = logging.getLogger(__name__)

Headers = tuple[tuple[str, str], ...]

JSON_CONTENT_TYPE = "application/json"


class Response(msgspec.Struct, frozen=True):
    """Immutable response payload."""

    status: int = int(Status.OK)
    headers: Headers = ()
    body: bytes = b""

    def with_headers(self, headers: Iterable[tuple[str, str]]) -> "Response":
        """Return a new response with ``headers`` appended."""

        return Response(status=self.status, headers=self.headers + tuple(headers), body=self.body)

    def header(self, name: str) -> str | None:
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None


def JSONResponse(
    data: Any,
    *,
    status: int = int(Status.OK),
    headers: Iterable[tuple[str, str]] | None = None,
) -> Response:
    """Create a JSON response encoded via :mod:`msgspec`."""

    default_headers = (("content-type", JSON_CONTENT_TYPE),)
    combined = default_headers + tuple(headers or ())
    return Response(status=status, headers=combined, body=json_encode(data))


def empty_response(status: int = int(Status.OK)) -> Response:
    return Response(status=status)


ErrorHandler = Callable[[BaseException], Response]


def default_error_handler(exc: BaseException) -> Response:
    """Render ``exc`` as ``{"error": message}``.

    :class:`HTTPError` keeps its status; every other exception becomes a 500.
    """

    if isinstance(exc, HTTPError):
        status = exc.status
        body = exc.to_response_body()
    else:
        status = int(Status.INTERNAL_SERVER_ERROR)
        body = json_encode({"error": str(exc)})
    if is_server_error(status):
        logger.error("request failed with %d: %s", status, exc)
    else:
        logger.warning("request rejected with %d: %s", status, exc)
    return Response(status=status, headers=(("content-type", JSON_CONTENT_TYPE),), body=body)


__all__ = [
    "ErrorHandler",
    "JSONResponse",
    "JSON_CONTENT_TYPE",
    "Response",
    "default_error_handler",
    "empty_response",
]
