from __future__ import annotations

import asyncio
import logging

import pytest

from autohttp.config import RouterConfig
from autohttp.context import Context, RequestContext
from autohttp.decoders import DEFAULT_MAX_BYTES_TO_READ
from autohttp.exceptions import BodyTooLargeError, HTTPError, InvocationFault
from autohttp.headers import Header, canonical_header_key
from autohttp.http import Status, ensure_status, is_server_error, reason_phrase
from autohttp.requests import Request
from autohttp.responses import JSONResponse, Response, default_error_handler
from autohttp.serialization import json_decode


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("content-type", "Content-Type"),
        ("X-REQUEST-ID", "X-Request-Id"),
        ("accept", "Accept"),
        ("bad header", "bad header"),
        ("", ""),
    ],
)
def test_canonical_header_key(raw: str, expected: str) -> None:
    assert canonical_header_key(raw) == expected


def test_header_bag_keeps_first_value() -> None:
    bag = Header.from_pairs([("x-token", "a"), ("X-Token", "b")])
    assert bag == {"X-Token": "a"}
    assert bag.get_header("x-token") == "a"
    assert bag.get_header("missing", "none") == "none"


def test_status_helpers() -> None:
    assert ensure_status(Status.NOT_FOUND) == 404
    with pytest.raises(ValueError):
        ensure_status(42)
    assert reason_phrase(413) in {"Request Entity Too Large", "Content Too Large"}
    assert reason_phrase(1000) == "Unknown Status"
    assert is_server_error(500)
    assert not is_server_error(404)


def test_http_error_body() -> None:
    error = HTTPError(Status.BAD_REQUEST, "broken")
    assert error.status == 400
    assert error.reason == "Bad Request"
    assert json_decode(error.to_response_body()) == {"error": "broken"}
    assert InvocationFault().status == 500


def test_default_error_handler(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="autohttp.responses"):
        rejected = default_error_handler(HTTPError(404, "not found"))
        failed = default_error_handler(ValueError("illegal"))
    assert rejected.status == 404
    assert failed.status == 500
    assert json_decode(failed.body) == {"error": "illegal"}
    assert [record.levelno for record in caplog.records] == [logging.WARNING, logging.ERROR]


def test_response_helpers() -> None:
    response = JSONResponse({"ok": True}, status=201, headers=[("x-id", "1")])
    assert response.body == b'{"ok":true}'
    assert response.header("X-ID") == "1"
    extended = Response().with_headers([("allow", "GET")])
    assert extended.headers == (("allow", "GET"),)
    assert extended.header("missing") is None


def test_request_headers_are_case_insensitive() -> None:
    request = Request(
        method="post",
        path="/",
        headers=[("Content-Type", "application/json"), ("content-type", "text/plain")],
    )
    assert request.method == "POST"
    assert request.content_type == "application/json"
    assert request.header("CONTENT-TYPE") == "application/json"
    assert len(request.raw_headers) == 2


def test_request_rejects_two_bodies() -> None:
    async def stream():
        yield b""

    with pytest.raises(ValueError):
        Request(method="POST", path="/", body=b"x", body_stream=stream())


@pytest.mark.asyncio
async def test_read_body_enforces_limit() -> None:
    with pytest.raises(BodyTooLargeError) as excinfo:
        await Request(method="POST", path="/", body=b"12345").read_body(4)
    assert excinfo.value.limit == 4
    assert await Request(method="POST", path="/", body=b"1234").read_body(4) == b"1234"


@pytest.mark.asyncio
async def test_read_body_is_cached_and_drain_is_empty() -> None:
    async def stream():
        yield b"ab"
        yield b"cd"

    request = Request(method="POST", path="/", body_stream=stream())
    assert request.body_pending
    assert await request.read_body() == b"abcd"
    assert await request.read_body() == b"abcd"
    assert await request.drain() == 0


@pytest.mark.asyncio
async def test_drain_counts_discarded_bytes() -> None:
    async def stream():
        yield b"abc"
        yield b"de"

    request = Request(method="POST", path="/", body_stream=stream())
    assert await request.drain() == 5
    assert not request.body_pending


@pytest.mark.asyncio
async def test_request_context_cancellation() -> None:
    ctx = RequestContext(values={"user": "ada"})
    child = ctx.with_value("trace", "t-1")
    assert isinstance(ctx, Context)
    assert not child.cancelled()
    assert child.value("user") == "ada"
    assert child.value("trace") == "t-1"
    assert ctx.value("trace") is None
    waiter = asyncio.create_task(child.wait())
    ctx.cancel()
    await asyncio.wait_for(waiter, timeout=1)
    assert child.cancelled()


@pytest.mark.asyncio
async def test_request_context_deadline() -> None:
    ctx = RequestContext(timeout=0.01)
    assert ctx.deadline() is not None
    await asyncio.wait_for(ctx.wait(), timeout=1)
    assert ctx.cancelled()
    assert RequestContext().deadline() is None


def test_router_config_defaults() -> None:
    config = RouterConfig()
    assert config.max_request_body_bytes == DEFAULT_MAX_BYTES_TO_READ == 65536
    assert config.disallow_unknown_fields
    assert not config.log_route_metrics
    assert config.static_directory is None
