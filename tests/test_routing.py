from __future__ import annotations

import logging

import msgspec
import pytest

from autohttp import Context, RouterConfig, TestClient
from autohttp.decoders import NoOpDecoder
from autohttp.encoders import NoOpEncoder
from autohttp.exceptions import (
    DuplicateRouteError,
    HTTPError,
    InvalidMethodError,
    RegistrationError,
    TooManyParametersError,
    UnsupportedTypeError,
)
from autohttp.requests import Request
from autohttp.routing import Router
from autohttp.serialization import json_decode


class GreetRequest(msgspec.Struct):
    Name: str


class GreetResponse(msgspec.Struct):
    Greeting: str


def greet(ctx: Context, payload: GreetRequest) -> tuple[GreetResponse, Exception | None]:
    return GreetResponse(Greeting=f"Hello, {payload.Name}"), None


def ping() -> None:
    return None


def other(payload: GreetRequest) -> GreetResponse:
    return GreetResponse(Greeting="other")


def too_many(a: GreetRequest, b: GreetRequest, c: GreetRequest, d: GreetRequest) -> None:
    return None


@pytest.fixture
def router() -> Router:
    router = Router()
    router.register("POST", "/greet", greet)
    return router


@pytest.mark.asyncio
async def test_greet_round_trip(router: Router) -> None:
    async with TestClient(router) as client:
        response = await client.post("/greet", json={"Name": "Ada"})
    assert response.status == 200
    assert response.header("content-type") == "application/json"
    assert json_decode(response.body) == {"Greeting": "Hello, Ada"}


@pytest.mark.asyncio
async def test_greet_malformed_body(router: Router) -> None:
    async with TestClient(router) as client:
        response = await client.post(
            "/greet",
            content=b'{"Name": ',
            headers={"content-type": "application/json"},
        )
    assert response.status == 400
    assert "error" in json_decode(response.body)


@pytest.mark.asyncio
async def test_greet_oversized_body(router: Router) -> None:
    body = b'{"Name": "' + b"a" * 70_000 + b'"}'
    async with TestClient(router) as client:
        response = await client.request(
            "POST",
            "/greet",
            content=body,
            headers={"content-type": "application/json"},
            chunk_size=4096,
        )
    assert response.status == 413


@pytest.mark.asyncio
async def test_greet_get_without_get_route_is_not_found(router: Router) -> None:
    async with TestClient(router) as client:
        response = await client.get("/greet")
    assert response.status == 404


@pytest.mark.asyncio
async def test_get_route_with_json_decoder_rejects_bodyless_method(router: Router) -> None:
    router.register("GET", "/greet", other)
    async with TestClient(router) as client:
        response = await client.get("/greet", headers={"content-type": "application/json"})
    assert response.status == 405


@pytest.mark.asyncio
async def test_unknown_path_is_not_found(router: Router) -> None:
    async with TestClient(router) as client:
        response = await client.post("/missing", json={})
    assert response.status == 404
    assert json_decode(response.body) == {"error": "not found"}


@pytest.mark.asyncio
async def test_missing_method_lists_allowed(router: Router) -> None:
    router.register("PUT", "/greet", other)
    async with TestClient(router) as client:
        response = await client.delete("/greet")
    assert response.status == 405
    assert response.header("allow") == "POST, PUT"


@pytest.mark.asyncio
async def test_options_is_always_ok(router: Router) -> None:
    async with TestClient(router) as client:
        known = await client.options("/greet")
        unknown = await client.options("/nowhere")
    assert known.status == 200
    assert known.body == b""
    assert unknown.status == 200


def test_register_rejects_unknown_method() -> None:
    router = Router()
    with pytest.raises(InvalidMethodError):
        router.register("TRACE", "/greet", greet)
    assert router.routes == {}


def test_register_normalizes_method_case() -> None:
    router = Router()
    router.register("post", "/greet", greet)
    assert list(router.routes["/greet"]) == ["POST"]


def test_duplicate_registration_keeps_first(router: Router) -> None:
    first = router.routes["/greet"]["POST"]
    with pytest.raises(DuplicateRouteError):
        router.register("POST", "/greet", other)
    assert router.routes["/greet"]["POST"] is first


def test_invalid_signature_leaves_table_untouched() -> None:
    router = Router()
    with pytest.raises(TooManyParametersError):
        router.register("POST", "/bad", too_many)
    assert "/bad" not in router.routes


@pytest.mark.asyncio
async def test_registration_closes_once_serving(router: Router) -> None:
    await router.serve(Request(method="OPTIONS", path="/greet"))
    assert router.frozen
    with pytest.raises(RegistrationError):
        router.register("PUT", "/greet", other)
    with pytest.raises(RegistrationError):
        router.add_middleware(object())  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_decorators_register_routes() -> None:
    router = Router()

    @router.post("/greet")
    def decorated(payload: GreetRequest) -> GreetResponse:
        return GreetResponse(Greeting=payload.Name)

    @router.delete("/ping", decoder=NoOpDecoder(), encoder=NoOpEncoder())
    def ping_route() -> None:
        return None

    assert decorated(GreetRequest(Name="x")) == GreetResponse(Greeting="x")
    async with TestClient(router) as client:
        greeted = await client.post("/greet", json={"Name": "Bo"})
        pinged = await client.delete("/ping")
    assert json_decode(greeted.body) == {"Greeting": "Bo"}
    assert pinged.status == 204


@pytest.mark.asyncio
async def test_unread_body_is_drained(router: Router) -> None:
    router.register("PUT", "/ping", ping, decoder=NoOpDecoder(), encoder=NoOpEncoder())
    consumed: list[bytes] = []

    async def stream():
        for chunk in (b"abc", b"def"):
            consumed.append(chunk)
            yield chunk

    request = Request(method="PUT", path="/ping", body_stream=stream())
    response = await router.serve(request)
    assert response.status == 204
    assert consumed == [b"abc", b"def"]
    assert not request.body_pending


@pytest.mark.asyncio
async def test_middleware_added_after_registration_applies(router: Router) -> None:
    class Deny:
        def before(self, request: Request, handler) -> None:
            raise HTTPError(403, "forbidden")

    router.add_middleware(Deny())
    async with TestClient(router) as client:
        response = await client.post("/greet", json={"Name": "Ada"})
    assert response.status == 403


@pytest.mark.asyncio
async def test_route_metrics_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    router = Router(RouterConfig(log_route_metrics=True))
    router.register("POST", "/greet", greet)
    with caplog.at_level(logging.DEBUG, logger="autohttp.routing"):
        async with TestClient(router) as client:
            await client.post("/greet", json={"Name": "Ada"})
    assert any("POST /greet" in record.getMessage() and "code 200" in record.getMessage() for record in caplog.records)


@pytest.mark.asyncio
async def test_from_config_mapping_sets_body_ceiling() -> None:
    router = Router.from_config({"max_request_body_bytes": 16})
    router.register("POST", "/greet", greet)
    assert router.config.max_request_body_bytes == 16
    async with TestClient(router) as client:
        small = await client.post("/greet", json={"Name": "A"})
        large = await client.post("/greet", json={"Name": "A much longer name"})
    assert small.status == 200
    assert large.status == 413


@pytest.mark.asyncio
async def test_unknown_fields_toggle() -> None:
    strict = Router()
    strict.register("POST", "/greet", greet)
    lenient = Router(RouterConfig(disallow_unknown_fields=False))
    lenient.register("POST", "/greet", greet)
    payload = {"Name": "Ada", "Extra": 1}
    async with TestClient(strict) as client:
        rejected = await client.post("/greet", json=payload)
    async with TestClient(lenient) as client:
        accepted = await client.post("/greet", json=payload)
    assert rejected.status == 400
    assert accepted.status == 200


@pytest.mark.asyncio
async def test_static_collaborator_serves_unknown_get(tmp_path) -> None:
    (tmp_path / "index.html").write_text("<html>app</html>")
    router = Router(RouterConfig(static_directory=str(tmp_path)))
    router.register("POST", "/greet", greet)
    async with TestClient(router) as client:
        page = await client.get("/dashboard")
        missing_post = await client.post("/dashboard", json={})
    assert page.status == 200
    assert page.body == b"<html>app</html>"
    assert missing_post.status == 404


class Patch(msgspec.Struct):
    Greeting: str


@pytest.mark.asyncio
async def test_patch_route(router: Router) -> None:
    @router.patch("/greet")
    def amend(payload: Patch) -> GreetResponse:
        return GreetResponse(Greeting=payload.Greeting.upper())

    async with TestClient(router) as client:
        response = await client.patch("/greet", json={"Greeting": "hi"})
    assert response.status == 200
    assert json_decode(response.body) == {"Greeting": "HI"}


def test_register_rejects_missing_return_annotation() -> None:
    def unannotated(ctx: Context, payload: GreetRequest):
        return {"Greeting": payload.Name}

    router = Router()
    with pytest.raises(UnsupportedTypeError):
        router.register("POST", "/greet", unannotated)
    assert router.routes == {}
