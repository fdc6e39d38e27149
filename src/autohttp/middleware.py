"""Pre-dispatch hooks."""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Awaitable, Iterable, Protocol

from .requests import Request

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .handler import Handler


class Middleware(Protocol):
    def before(self, request: Request, handler: "Handler") -> Awaitable[None] | None:  # pragma: no cover - protocol
        """Raise to abort ``request`` before its body is decoded."""
        ...


async def run_before(middlewares: Iterable[Middleware], request: Request, handler: "Handler") -> None:
    """Run each hook in order, stopping at the first one that raises."""

    for middleware in middlewares:
        result = middleware.before(request, handler)
        if inspect.isawaitable(result):
            await result
