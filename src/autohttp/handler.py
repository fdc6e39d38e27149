"""Per-route dispatch pipeline: decode, invoke, then encode or translate."""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence

from .decoders import Decoder
from .encoders import Encoder
from .exceptions import DecoderRequiredError
from .invoker import invoke
from .middleware import Middleware, run_before
from .requests import Request
from .responses import ErrorHandler, Response, default_error_handler
from .signature import HandlerSignature, inspect_handler

logger = logging.getLogger(__name__)


class Handler:
    """A request handler generated from a plain or coroutine function."""

    __slots__ = ("decoder", "encoder", "error_handler", "fn", "middlewares", "signature")

    def __init__(
        self,
        fn: Callable[..., Any],
        *,
        decoder: Decoder | None,
        encoder: Encoder | None,
        middlewares: Sequence[Middleware] = (),
        error_handler: ErrorHandler | None = None,
    ) -> None:
        if decoder is None or encoder is None:
            raise DecoderRequiredError("a decoder and encoder must be supplied, use NoOpDecoder/NoOpEncoder")
        signature = inspect_handler(fn)
        decoder.validate(signature)
        encoder.validate(signature)
        self.fn = fn
        self.signature: HandlerSignature = signature
        self.decoder = decoder
        self.encoder = encoder
        self.middlewares = middlewares
        self.error_handler = error_handler or default_error_handler

    async def __call__(self, request: Request) -> Response:
        """Produce exactly one response for ``request``."""

        try:
            await run_before(self.middlewares, request, self)
        except Exception as exc:
            logger.info("middleware aborted %s %s: %s", request.method, request.path, exc)
            return self.error_handler(exc)

        try:
            arguments = await self.decoder.decode(self.signature, request)
        except Exception as exc:
            return self.error_handler(exc)

        outcome = await invoke(self.fn, self.signature, arguments)
        if outcome.error is not None:
            return self.error_handler(outcome.error)

        try:
            encoded = self.encoder.encode(outcome.value)
        except Exception as exc:
            logger.error("error encoding result of %s: %s", self.signature.name, exc)
            return self.error_handler(exc)
        return Response(status=encoded.status, headers=encoded.headers, body=encoded.body)

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"Handler({self.signature.name})"
