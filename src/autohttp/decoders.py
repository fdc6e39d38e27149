"""Bind incoming requests to handler arguments."""

from __future__ import annotations

import dataclasses
from typing import Any, Protocol, is_typeddict

import msgspec
from msgspec import inspect as msgspec_inspect

from .exceptions import BodyTooLargeError, HTTPError, SignatureError
from .headers import Header
from .http import BODYLESS_METHODS, Status
from .requests import Request
from .responses import JSON_CONTENT_TYPE
from .serialization import json_convert, json_decode
from .signature import HandlerSignature


# 65536
DEFAULT_MAX_BYTES_TO_READ = 2 << 15


class Decoder(Protocol):
    def validate(self, signature: HandlerSignature) -> None: ...

    async def decode(self, signature: HandlerSignature, request: Request) -> list[Any]:
        """Return the positional arguments to call the handler with."""
        ...


class JSONDecoder:
    """Decode a single JSON document into the handler's payload parameter."""

    def __init__(
        self,
        *,
        max_bytes: int = DEFAULT_MAX_BYTES_TO_READ,
        disallow_unknown_fields: bool = True,
    ) -> None:
        if max_bytes <= 0:
            raise ValueError("max_bytes must be positive")
        self.max_bytes = max_bytes
        self.disallow_unknown_fields = disallow_unknown_fields

    def validate(self, signature: HandlerSignature) -> None:
        return None

    async def decode(self, signature: HandlerSignature, request: Request) -> list[Any]:
        if JSON_CONTENT_TYPE not in request.content_type:
            raise HTTPError(Status.UNSUPPORTED_MEDIA_TYPE, "invalid mime type")
        if request.method in BODYLESS_METHODS:
            raise HTTPError(
                Status.METHOD_NOT_ALLOWED,
                f"{request.method} requests prohibited for this endpoint",
            )

        arguments: list[Any] = [None] * len(signature.parameters)
        if signature.context_index is not None:
            arguments[signature.context_index] = request.context
        if signature.header_index is not None:
            arguments[signature.header_index] = Header.from_pairs(request.raw_headers)
        if signature.payload_index is not None:
            arguments[signature.payload_index] = await self._decode_payload(signature, request)
        return arguments

    async def _decode_payload(self, signature: HandlerSignature, request: Request) -> Any:
        try:
            body = await request.read_body(self.max_bytes)
        except BodyTooLargeError as exc:
            raise HTTPError(Status.PAYLOAD_TOO_LARGE, str(exc)) from exc
        try:
            raw = json_decode(body)
        except msgspec.DecodeError as exc:
            raise HTTPError(Status.BAD_REQUEST, str(exc)) from exc
        if self.disallow_unknown_fields:
            _reject_unknown_fields(raw, signature.payload_target)
        try:
            return json_convert(raw, signature.payload_annotation)
        except msgspec.ValidationError as exc:
            raise HTTPError(Status.BAD_REQUEST, str(exc)) from exc


class NoOpDecoder:
    """Decoder for handlers without parameters."""

    def validate(self, signature: HandlerSignature) -> None:
        if signature.parameters:
            raise SignatureError("noop decoder only works for functions with no inputs")

    async def decode(self, signature: HandlerSignature, request: Request) -> list[Any]:
        return []


def _reject_unknown_fields(raw: Any, target: Any) -> None:
    if not isinstance(raw, dict):
        return
    known = _known_fields(target)
    if known is None:
        return
    for key in raw:
        if key not in known:
            raise HTTPError(Status.BAD_REQUEST, f"json: unknown field {key!r}")


def _known_fields(target: Any) -> frozenset[str] | None:
    """Return the wire names of a record type's fields, ``None`` for open shapes."""

    if not isinstance(target, type):
        return None
    if not (issubclass(target, msgspec.Struct) or dataclasses.is_dataclass(target) or is_typeddict(target)):
        return None
    info = msgspec_inspect.type_info(target)
    fields = getattr(info, "fields", None)
    if fields is None:  # pragma: no cover - record types always expose fields
        return None
    return frozenset(field.encode_name for field in fields)


__all__ = ["DEFAULT_MAX_BYTES_TO_READ", "Decoder", "JSONDecoder", "NoOpDecoder"]
