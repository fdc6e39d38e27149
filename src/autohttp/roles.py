"""Classification of handler parameter annotations into binding roles."""

from __future__ import annotations

import dataclasses
import inspect
import types
from collections.abc import Mapping, Sequence, Set
from enum import Enum
from typing import Any, Union, get_args, get_origin, is_typeddict

import msgspec

from .context import Context
from .exceptions import UnsupportedTypeError
from .headers import Header

_COMPOSITE_BASES: tuple[type, ...] = (dict, list, tuple, set, frozenset, Mapping, Sequence, Set)
_SCALAR_SEQUENCES: tuple[type, ...] = (str, bytes, bytearray, memoryview)


class Role(str, Enum):
    """Binding role a handler parameter plays."""

    CONTEXT = "context"
    HEADER = "header"
    PAYLOAD = "payload"
    UNCLASSIFIED = "unclassified"

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.value


def unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Strip one level of ``X | None`` from ``annotation``."""

    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        members = get_args(annotation)
        remaining = [member for member in members if member is not type(None)]
        if len(remaining) == 1 and len(members) == 2:
            return remaining[0], True
    return annotation, False


def is_context_type(annotation: Any) -> bool:
    return isinstance(annotation, type) and get_origin(annotation) is None and issubclass(annotation, Context)


def is_header_type(annotation: Any) -> bool:
    return annotation is Header


def is_error_type(annotation: Any) -> bool:
    inner, _ = unwrap_optional(annotation)
    return isinstance(inner, type) and get_origin(inner) is None and issubclass(inner, Exception)


def is_payload_type(annotation: Any) -> bool:
    inner, _ = unwrap_optional(annotation)
    if is_header_type(inner):
        return False
    origin = get_origin(inner)
    if origin is not None:
        return _is_composite_class(origin)
    if not isinstance(inner, type):
        return False
    if issubclass(inner, msgspec.Struct) or dataclasses.is_dataclass(inner) or is_typeddict(inner):
        return True
    return _is_composite_class(inner)


def _is_composite_class(candidate: Any) -> bool:
    if not isinstance(candidate, type):
        return False
    if issubclass(candidate, _SCALAR_SEQUENCES):
        return False
    return issubclass(candidate, _COMPOSITE_BASES)


def classify(annotation: Any, *, index: int | None = None) -> Role:
    """Return the :class:`Role` a parameter annotated with ``annotation`` plays."""

    if annotation is inspect.Parameter.empty:
        return Role.UNCLASSIFIED
    if is_header_type(annotation):
        return Role.HEADER
    context = is_context_type(annotation)
    payload = is_payload_type(annotation)
    if context and payload:
        raise UnsupportedTypeError(
            f"{annotation!r} is both a context and a decodable payload",
            index=index,
            annotation=annotation,
        )
    if context:
        return Role.CONTEXT
    if payload:
        return Role.PAYLOAD
    return Role.UNCLASSIFIED


__all__ = [
    "Role",
    "classify",
    "is_context_type",
    "is_error_type",
    "is_header_type",
    "is_payload_type",
    "unwrap_optional",
]
