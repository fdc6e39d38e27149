"""Route table, serve entry point and ASGI adapter."""

from __future__ import annotations

import logging
import time
from typing import Any, AsyncIterator, Awaitable, Callable, Mapping

import msgspec

from .config import RouterConfig
from .context import RequestContext
from .decoders import Decoder, JSONDecoder
from .encoders import Encoder, JSONEncoder
from .exceptions import DuplicateRouteError, HTTPError, InvalidMethodError, RegistrationError
from .handler import Handler
from .http import ALLOWED_METHODS, Status
from .middleware import Middleware
from .requests import Request
from .responses import ErrorHandler, Response, default_error_handler, empty_response
from .static import StaticAssets

logger = logging.getLogger(__name__)

Endpoint = Callable[..., Any]
Receive = Callable[[], Awaitable[Mapping[str, Any]]]
Send = Callable[[Mapping[str, Any]], Awaitable[None]]


class Router:
    """Maps ``(path, method)`` pairs to handlers generated from plain functions.

    Routes are registered during startup; the table is frozen by the first
    served request and only read afterwards.
    """

    def __init__(
        self,
        config: RouterConfig | None = None,
        *,
        decoder: Decoder | None = None,
        encoder: Encoder | None = None,
        error_handler: ErrorHandler | None = None,
        static: StaticAssets | None = None,
    ) -> None:
        self.config = config or RouterConfig()
        self.routes: dict[str, dict[str, Handler]] = {}
        self.default_decoder: Decoder = decoder or JSONDecoder(
            max_bytes=self.config.max_request_body_bytes,
            disallow_unknown_fields=self.config.disallow_unknown_fields,
        )
        self.default_encoder: Encoder = encoder or JSONEncoder()
        self.error_handler = error_handler or default_error_handler
        if static is None and self.config.static_directory is not None:
            static = StaticAssets(
                self.config.static_directory,
                index_file=self.config.static_index_file,
                cache_control=self.config.static_cache_control,
            )
        self.static = static
        self._middlewares: list[Middleware] = []
        self._frozen = False

    @classmethod
    def from_config(cls, config: RouterConfig | Mapping[str, Any], **kwargs: Any) -> "Router":
        if isinstance(config, RouterConfig):
            return cls(config, **kwargs)
        return cls(msgspec.convert(config, type=RouterConfig), **kwargs)

    # ------------------------------------------------------------------ registration
    def register(
        self,
        method: str,
        path: str,
        fn: Endpoint,
        *,
        decoder: Decoder | None = None,
        encoder: Encoder | None = None,
    ) -> Handler:
        """Validate ``fn`` and bind it to ``method`` and ``path``.

        Raises a :class:`~autohttp.exceptions.RegistrationError` subclass and
        leaves the table untouched when the method, the pair or the signature is
        rejected.
        """

        if self._frozen:
            raise RegistrationError("routes must be registered before the router starts serving")
        normalized = method.upper()
        if normalized not in ALLOWED_METHODS:
            raise InvalidMethodError(method)
        if normalized in self.routes.get(path, {}):
            raise DuplicateRouteError(normalized, path)
        handler = Handler(
            fn,
            decoder=decoder or self.default_decoder,
            encoder=encoder or self.default_encoder,
            middlewares=self._middlewares,
            error_handler=self.error_handler,
        )
        self.routes.setdefault(path, {})[normalized] = handler
        logger.debug("registered %s %s -> %s", normalized, path, handler.signature.name)
        return handler

    def route(
        self,
        method: str,
        path: str,
        *,
        decoder: Decoder | None = None,
        encoder: Encoder | None = None,
    ) -> Callable[[Endpoint], Endpoint]:
        def decorator(func: Endpoint) -> Endpoint:
            self.register(method, path, func, decoder=decoder, encoder=encoder)
            return func

        return decorator

    def get(self, path: str, **kwargs: Any) -> Callable[[Endpoint], Endpoint]:
        return self.route("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Callable[[Endpoint], Endpoint]:
        return self.route("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> Callable[[Endpoint], Endpoint]:
        return self.route("PUT", path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> Callable[[Endpoint], Endpoint]:
        return self.route("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Callable[[Endpoint], Endpoint]:
        return self.route("DELETE", path, **kwargs)

    def add_middleware(self, middleware: Middleware) -> None:
        """Append a pre-dispatch hook shared by every route."""

        if self._frozen:
            raise RegistrationError("middleware must be added before the router starts serving")
        self._middlewares.append(middleware)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ------------------------------------------------------------------ request handling
    async def serve(self, request: Request) -> Response:
        """Dispatch ``request`` and return its single response."""

        self._frozen = True
        start = time.perf_counter()
        try:
            response = await self._dispatch(request)
        except Exception as exc:
            logger.exception("error handler failed for %s %s", request.method, request.path)
            response = default_error_handler(exc)
        finally:
            leftover = await request.drain()
            if leftover:
                logger.debug("discarded %d unread body bytes for %s %s", leftover, request.method, request.path)
        if self.config.log_route_metrics:
            logger.debug(
                "served %d bytes for %s %s in %.3fms with code %d",
                len(response.body),
                request.method,
                request.path,
                (time.perf_counter() - start) * 1000,
                response.status,
            )
        return response

    async def _dispatch(self, request: Request) -> Response:
        if request.method == "OPTIONS":
            return empty_response(int(Status.OK))
        methods = self.routes.get(request.path)
        if methods is None:
            return await self._serve_not_found(request)
        handler = methods.get(request.method)
        if handler is None:
            if request.method != "GET":
                response = self.error_handler(HTTPError(Status.METHOD_NOT_ALLOWED, "method not allowed"))
                return response.with_headers((("allow", ", ".join(sorted(methods))),))
            return await self._serve_not_found(request)
        return await handler(request)

    async def _serve_not_found(self, request: Request) -> Response:
        if self.static is None or request.method not in {"GET", "HEAD"}:
            return self.error_handler(HTTPError(Status.NOT_FOUND, "not found"))
        try:
            return await self.static.serve(request.path, method=request.method)
        except HTTPError as exc:
            return self.error_handler(exc)

    # ------------------------------------------------------------------ interface adapters
    async def __call__(self, scope: Mapping[str, Any], receive: Receive, send: Send) -> None:
        scope_type = scope.get("type")
        if scope_type == "http":
            await self._handle_http(scope, receive, send)
            return
        if scope_type == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        raise RuntimeError("Router only supports HTTP and lifespan scopes")

    async def _handle_http(self, scope: Mapping[str, Any], receive: Receive, send: Send) -> None:
        headers = [(key.decode("latin-1"), value.decode("latin-1")) for key, value in scope.get("headers", [])]
        context = RequestContext()

        async def body_stream() -> AsyncIterator[bytes]:
            while True:
                message = await receive()
                message_type = message.get("type")
                if message_type == "http.disconnect":
                    context.cancel()
                    return
                if message_type != "http.request":
                    continue
                chunk = message.get("body", b"")
                if chunk:
                    yield chunk
                if not message.get("more_body", False):
                    return

        request = Request(
            method=scope["method"],
            path=scope["path"],
            headers=headers,
            query_string=(scope.get("query_string") or b"").decode("latin-1"),
            body_stream=body_stream(),
            context=context,
        )
        response = await self.serve(request)
        await send(
            {
                "type": "http.response.start",
                "status": response.status,
                "headers": [(k.encode("latin-1"), v.encode("latin-1")) for k, v in response.headers],
            }
        )
        await send({"type": "http.response.body", "body": response.body})

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            message_type = message.get("type")
            if message_type == "lifespan.startup":
                self.freeze()
                await send({"type": "lifespan.startup.complete"})
            elif message_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return


__all__ = ["Router"]
