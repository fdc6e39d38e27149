"""Registration-time validation of handler signatures."""

from __future__ import annotations

import inspect
from enum import Enum
from typing import Any, Callable, get_args, get_origin, get_type_hints

import msgspec

from .exceptions import (
    DuplicateRoleError,
    TooManyParametersError,
    TooManyReturnValuesError,
    UnsupportedTypeError,
    WrongPositionError,
)
from .roles import Role, classify, is_error_type, unwrap_optional

MAX_PARAMETERS = 3
MAX_RETURN_VALUES = 2

_POSITIONAL_KINDS = frozenset({inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD})


class ReturnRole(str, Enum):
    VALUE = "value"
    ERROR = "error"

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.value


class HandlerSignature(msgspec.Struct, frozen=True):
    """Validated binding shape of a handler, computed once at registration."""

    name: str
    parameters: tuple[Role, ...] = ()
    context_index: int | None = None
    header_index: int | None = None
    payload_index: int | None = None
    payload_annotation: Any = None
    payload_target: Any = None
    returns: tuple[ReturnRole, ...] = ()

    @property
    def has_value(self) -> bool:
        return ReturnRole.VALUE in self.returns

    @property
    def has_error(self) -> bool:
        return ReturnRole.ERROR in self.returns

    @property
    def has_payload(self) -> bool:
        return self.payload_index is not None


def inspect_handler(fn: Callable[..., Any]) -> HandlerSignature:
    """Classify every parameter and return value of ``fn``.

    Raises a :class:`~autohttp.exceptions.SignatureError` subclass describing the
    first rule ``fn`` violates.
    """

    if not callable(fn):
        raise UnsupportedTypeError(f"handler {fn!r} is not callable", annotation=fn)
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError) as exc:
        raise UnsupportedTypeError(f"cannot inspect handler {fn!r}", annotation=fn) from exc
    hints = _type_hints(fn)

    parameters = list(signature.parameters.values())
    if len(parameters) > MAX_PARAMETERS:
        raise TooManyParametersError(
            f"handler accepts {len(parameters)} parameters, at most {MAX_PARAMETERS} are supported"
        )

    roles: list[Role] = []
    found: dict[Role, int] = {}
    for index, parameter in enumerate(parameters):
        annotation = hints.get(parameter.name, inspect.Parameter.empty)
        if parameter.kind not in _POSITIONAL_KINDS:
            raise UnsupportedTypeError(
                f"parameter {parameter.name!r} must be positional",
                index=index,
                annotation=annotation,
            )
        role = classify(annotation, index=index)
        if role is Role.UNCLASSIFIED:
            raise UnsupportedTypeError(
                f"parameter {parameter.name!r} has unsupported type {annotation!r}",
                index=index,
                annotation=annotation,
            )
        if role in found:
            raise DuplicateRoleError(
                f"parameter {parameter.name!r} duplicates the {role.value} role of parameter {found[role]}",
                index=index,
                annotation=annotation,
            )
        if role is Role.CONTEXT and index != 0:
            raise WrongPositionError("context must be the first parameter", index=index, annotation=annotation)
        if role is Role.HEADER and index > 1:
            raise WrongPositionError(
                "header must be the first or second parameter",
                index=index,
                annotation=annotation,
            )
        found[role] = index
        roles.append(role)

    payload_index = found.get(Role.PAYLOAD)
    payload_annotation: Any = None
    payload_target: Any = None
    if payload_index is not None:
        payload_annotation = hints[parameters[payload_index].name]
        payload_target, _ = unwrap_optional(payload_annotation)

    return HandlerSignature(
        name=getattr(fn, "__qualname__", repr(fn)),
        parameters=tuple(roles),
        context_index=found.get(Role.CONTEXT),
        header_index=found.get(Role.HEADER),
        payload_index=payload_index,
        payload_annotation=payload_annotation,
        payload_target=payload_target,
        returns=_return_roles(hints.get("return", inspect.Signature.empty)),
    )


def validate(fn: Callable[..., Any]) -> None:
    """Raise if ``fn`` cannot be served; return ``None`` otherwise."""

    inspect_handler(fn)


def _type_hints(fn: Callable[..., Any]) -> dict[str, Any]:
    target: Any = fn
    if not (inspect.isfunction(fn) or inspect.ismethod(fn)) and hasattr(fn, "__call__"):
        target = getattr(fn, "__call__")
    try:
        return get_type_hints(target)
    except (NameError, TypeError) as exc:
        raise UnsupportedTypeError(f"cannot resolve annotations of {fn!r}: {exc}", annotation=fn) from exc


def _return_roles(annotation: Any) -> tuple[ReturnRole, ...]:
    if annotation is inspect.Signature.empty:
        raise UnsupportedTypeError("handler must annotate its return type, use -> None when it returns nothing")
    if annotation is None or annotation is type(None):
        return ()
    members = _tuple_members(annotation)
    if members is None:
        return (ReturnRole.ERROR if is_error_type(annotation) else ReturnRole.VALUE,)
    if len(members) > MAX_RETURN_VALUES:
        raise TooManyReturnValuesError(
            f"handler returns {len(members)} values, at most {MAX_RETURN_VALUES} are supported",
            annotation=annotation,
        )
    roles = tuple(ReturnRole.ERROR if is_error_type(member) else ReturnRole.VALUE for member in members)
    if roles.count(ReturnRole.ERROR) > 1:
        raise DuplicateRoleError("handler returns more than one error", annotation=annotation)
    if roles.count(ReturnRole.VALUE) > 1:
        raise DuplicateRoleError(
            "handler returns more than one value, error returns must be Exception subclasses",
            annotation=annotation,
        )
    return roles


def _tuple_members(annotation: Any) -> tuple[Any, ...] | None:
    """Return the members of a fixed ``tuple[A, B, ...]`` return annotation.

    Bare ``tuple``, variadic ``tuple[X, ...]`` and single member tuples are
    ordinary values rather than multiple returns.
    """

    if get_origin(annotation) is not tuple:
        return None
    members = get_args(annotation)
    if len(members) < 2 or members[-1] is Ellipsis:
        return None
    return members


__all__ = [
    "MAX_PARAMETERS",
    "MAX_RETURN_VALUES",
    "HandlerSignature",
    "ReturnRole",
    "inspect_handler",
    "validate",
]
