"""Cancellation carriers passed to handlers that ask for one."""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Any, Mapping


class Context(ABC):
    """Capability marker for per-request cancellation and deadline carriers.

    Handler parameters annotated with this class, a subclass of it, or a class
    registered through :meth:`Context.register` receive the request context.
    """

    @abstractmethod
    def deadline(self) -> float | None:
        """Return the absolute ``time.monotonic`` deadline, if any."""

    @abstractmethod
    def cancelled(self) -> bool: ...

    @abstractmethod
    async def wait(self) -> None:
        """Block until the context is cancelled."""

    def value(self, key: str, default: Any = None) -> Any:
        return default


class RequestContext(Context):
    __slots__ = ("_deadline", "_event", "_values")

    def __init__(
        self,
        *,
        timeout: float | None = None,
        values: Mapping[str, Any] | None = None,
    ) -> None:
        self._event = asyncio.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._values = dict(values or {})

    def deadline(self) -> float | None:
        return self._deadline

    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        if self._deadline is None:
            await self._event.wait()
            return
        remaining = self._deadline - time.monotonic()
        if remaining <= 0:
            return
        try:
            await asyncio.wait_for(self._event.wait(), timeout=remaining)
        except TimeoutError:
            return

    def value(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def with_value(self, key: str, value: Any) -> "RequestContext":
        """Return a child context sharing cancellation with ``self`` and carrying ``key``."""

        child = RequestContext(values={**self._values, key: value})
        child._event = self._event
        child._deadline = self._deadline
        return child
