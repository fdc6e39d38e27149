"""Request primitives."""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator, Iterable, Mapping

from .context import RequestContext
from .exceptions import BodyTooLargeError

HeaderInput = Mapping[str, str] | Iterable[tuple[str, str]]


class Request:
    """View of an incoming request whose body is read at most once, lazily."""

    __slots__ = (
        "_body",
        "_chunks",
        "context",
        "headers",
        "method",
        "path",
        "query_string",
        "raw_headers",
    )

    def __init__(
        self,
        *,
        method: str,
        path: str,
        headers: HeaderInput | None = None,
        query_string: str | None = None,
        body: bytes | None = None,
        body_stream: AsyncIterable[bytes] | None = None,
        context: RequestContext | None = None,
    ) -> None:
        if body is not None and body_stream is not None:
            raise ValueError("Request body and body_stream are mutually exclusive")
        self.method = method.upper()
        self.path = path
        pairs = headers.items() if isinstance(headers, Mapping) else (headers or ())
        self.raw_headers: tuple[tuple[str, str], ...] = tuple((name.lower(), value) for name, value in pairs)
        self.headers: dict[str, str] = {}
        for name, value in self.raw_headers:
            self.headers.setdefault(name, value)
        self.query_string = query_string or ""
        self.context = context or RequestContext()
        self._body: bytes | None = body
        self._chunks: AsyncIterator[bytes] | None = body_stream.__aiter__() if body_stream is not None else None

    def header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name.lower(), default)

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")

    @property
    def body_pending(self) -> bool:
        """``True`` while body bytes may still be waiting on the transport."""

        return self._chunks is not None

    async def read_body(self, limit: int | None = None) -> bytes:
        """Return the full body, raising :class:`BodyTooLargeError` past ``limit`` bytes.

        Reading stops as soon as the ceiling is crossed, so at most ``limit``
        plus one chunk is ever buffered.
        """

        if self._body is not None:
            if limit is not None and len(self._body) > limit:
                raise BodyTooLargeError(limit)
            return self._body
        if self._chunks is None:
            self._body = b""
            return self._body
        buffer = bytearray()
        async for chunk in self._chunks:
            buffer.extend(chunk)
            if limit is not None and len(buffer) > limit:
                raise BodyTooLargeError(limit)
        self._chunks = None
        self._body = bytes(buffer)
        return self._body

    async def drain(self) -> int:
        """Consume and discard whatever body is left unread; return the byte count."""

        if self._chunks is None:
            return 0
        discarded = 0
        async for chunk in self._chunks:
            discarded += len(chunk)
        self._chunks = None
        return discarded
