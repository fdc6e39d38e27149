"""Testing helpers."""

from __future__ import annotations

from typing import Any, AsyncIterator, Mapping

from .requests import Request
from .responses import Response
from .routing import Router
from .serialization import json_encode


class TestClient:
    """Async test client that executes requests in-process."""

    __test__ = False

    def __init__(self, router: Router) -> None:
        self.router = router

    async def __aenter__(self) -> "TestClient":
        self.router.freeze()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any | None = None,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
        chunk_size: int | None = None,
    ) -> Response:
        """Dispatch a request; ``chunk_size`` streams the body in pieces like a socket would."""

        request_headers = dict(headers or {})
        payload = content if content is not None else b""
        if json is not None:
            payload = json_encode(json)
            request_headers.setdefault("content-type", "application/json")
        if chunk_size is None:
            request = Request(method=method, path=path, headers=request_headers, body=payload)
        else:
            request = Request(
                method=method,
                path=path,
                headers=request_headers,
                body_stream=_chunked(payload, chunk_size),
            )
        return await self.router.serve(request)

    async def get(self, path: str, *, headers: Mapping[str, str] | None = None) -> Response:
        return await self.request("GET", path, headers=headers)

    async def options(self, path: str, *, headers: Mapping[str, str] | None = None) -> Response:
        return await self.request("OPTIONS", path, headers=headers)

    async def post(
        self,
        path: str,
        *,
        json: Any | None = None,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Response:
        return await self.request("POST", path, json=json, content=content, headers=headers)

    async def put(
        self,
        path: str,
        *,
        json: Any | None = None,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Response:
        return await self.request("PUT", path, json=json, content=content, headers=headers)

    async def patch(
        self,
        path: str,
        *,
        json: Any | None = None,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Response:
        return await self.request("PATCH", path, json=json, content=content, headers=headers)

    async def delete(self, path: str, *, headers: Mapping[str, str] | None = None) -> Response:
        return await self.request("DELETE", path, headers=headers)


async def _chunked(payload: bytes, size: int) -> AsyncIterator[bytes]:
    for offset in range(0, len(payload), size):
        yield payload[offset : offset + size]
