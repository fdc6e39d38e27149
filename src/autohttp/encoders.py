"""Turn handler results into status, header and body triples."""

from __future__ import annotations

from typing import Any, Protocol

import msgspec

from .exceptions import EncodeError, SignatureError
from .http import Status
from .responses import JSON_CONTENT_TYPE, Headers
from .serialization import json_encode
from .signature import HandlerSignature


class Encoded(msgspec.Struct, frozen=True):
    status: int
    headers: Headers = ()
    body: bytes = b""


class Encoder(Protocol):
    """Serializes a result value; never writes to the transport itself."""

    def validate(self, signature: HandlerSignature) -> None: ...

    def encode(self, value: Any) -> Encoded: ...


class JSONEncoder:
    def validate(self, signature: HandlerSignature) -> None:
        return None

    def encode(self, value: Any) -> Encoded:
        if value is None:
            return Encoded(status=int(Status.NO_CONTENT))
        try:
            body = json_encode(value)
        except (TypeError, ValueError, msgspec.EncodeError) as exc:
            raise EncodeError(f"cannot encode {type(value).__name__} as json: {exc}") from exc
        return Encoded(
            status=int(Status.OK),
            headers=(("content-type", JSON_CONTENT_TYPE),),
            body=body,
        )


class NoOpEncoder:
    """Encoder for handlers that return nothing."""

    def validate(self, signature: HandlerSignature) -> None:
        if signature.returns:
            raise SignatureError("noop encoder only works for functions with no return values")

    def encode(self, value: Any) -> Encoded:
        return Encoded(status=int(Status.NO_CONTENT))


__all__ = ["Encoded", "Encoder", "JSONEncoder", "NoOpEncoder"]
