"""Call bound handlers inside a fault boundary and split their results."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Sequence

import msgspec

from .exceptions import HTTPError, InvocationFault
from .signature import HandlerSignature, ReturnRole

logger = logging.getLogger(__name__)


class Outcome(msgspec.Struct, frozen=True):
    """Result of one handler call: at most one value and at most one error."""

    value: Any = None
    error: BaseException | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


async def invoke(fn: Callable[..., Any], signature: HandlerSignature, arguments: Sequence[Any]) -> Outcome:
    """Call ``fn`` with ``arguments``; never raises for handler failures.

    A raised :class:`HTTPError` is reported as the outcome's error unchanged.
    Any other exception is logged and replaced by a generic
    :class:`InvocationFault`.
    """

    try:
        result = fn(*arguments)
        if inspect.isawaitable(result):
            result = await result
    except HTTPError as exc:
        return Outcome(error=exc)
    except Exception as exc:
        logger.exception("panic in route execution of %s", signature.name)
        fault = InvocationFault()
        fault.__cause__ = exc
        return Outcome(error=fault)
    return split_returns(signature, result)


def split_returns(signature: HandlerSignature, result: Any) -> Outcome:
    """Partition ``result`` into value and error following ``signature.returns``.

    Only ``None`` in the error position counts as success.
    """

    if not signature.returns:
        return Outcome()
    if len(signature.returns) == 1:
        values: tuple[Any, ...] = (result,)
    else:
        if not isinstance(result, tuple) or len(result) != len(signature.returns):
            fault = InvocationFault(
                f"{signature.name} must return a {len(signature.returns)}-tuple, got {type(result).__name__}"
            )
            logger.error("%s", fault)
            return Outcome(error=fault)
        values = result

    value: Any = None
    for role, returned in zip(signature.returns, values):
        if role is ReturnRole.ERROR:
            if returned is None:
                continue
            if not isinstance(returned, Exception):
                return Outcome(error=InvocationFault(f"{signature.name} returned a non-exception error {returned!r}"))
            return Outcome(error=returned)
        else:
            value = returned
    return Outcome(value=value)


__all__ = ["Outcome", "invoke", "split_returns"]
