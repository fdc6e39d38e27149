"""Minimal autohttp application that ships with the framework.

Install the package, then run ``python example.py`` to boot a local server on
Granian. ``POST /greet`` with ``{"Name": "Ada"}`` answers with a greeting and
``DELETE /ping`` answers ``204``.

Override ``AUTOHTTP_HOST``, ``AUTOHTTP_PORT`` or ``AUTOHTTP_MAX_BODY`` to match
your environment. Set ``AUTOHTTP_STATIC`` to a directory to serve a single page
application for unknown ``GET`` paths.
"""

from __future__ import annotations

import logging
import os

import msgspec

from autohttp import Context, Header, NoOpDecoder, NoOpEncoder, Router, RouterConfig
from autohttp.server import ServerConfig, run


class GreetRequest(msgspec.Struct):
    Name: str


class GreetResponse(msgspec.Struct):
    Greeting: str
    Agent: str = ""


def create_router() -> Router:
    """Instantiate the demo router with its routes attached."""

    config = RouterConfig(
        max_request_body_bytes=int(os.getenv("AUTOHTTP_MAX_BODY", "65536")),
        log_route_metrics=True,
        static_directory=os.getenv("AUTOHTTP_STATIC") or None,
    )
    router = Router(config)

    @router.post("/greet")
    async def greet(ctx: Context, headers: Header, payload: GreetRequest) -> tuple[GreetResponse, Exception | None]:
        if not payload.Name:
            return GreetResponse(Greeting=""), ValueError("Name must not be empty")
        agent = headers.get_header("user-agent") or ""
        return GreetResponse(Greeting=f"Hello, {payload.Name}", Agent=agent), None

    @router.delete("/ping", decoder=NoOpDecoder(), encoder=NoOpEncoder())
    def ping() -> None:
        return None

    return router


def main() -> None:
    """Boot the Granian development server."""

    logging.basicConfig(level=logging.DEBUG)
    router = create_router()
    config = ServerConfig(
        host=os.getenv("AUTOHTTP_HOST", "127.0.0.1"),
        port=int(os.getenv("AUTOHTTP_PORT", "8080")),
    )
    print("Serving autohttp example on Granian at http://%s:%d" % (config.host, config.port))
    run(router, config)


if __name__ == "__main__":
    main()
