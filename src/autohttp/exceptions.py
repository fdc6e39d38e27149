"""Framework exception types."""

from __future__ import annotations

from typing import Any

from .http import Status, ensure_status, reason_phrase
from .serialization import json_encode


class AutoHTTPError(Exception):
    """Base error type."""


# ---------------------------------------------------------------- registration
class RegistrationError(AutoHTTPError):
    """Raised synchronously when a route cannot be registered."""


class InvalidMethodError(RegistrationError):
    def __init__(self, method: str) -> None:
        super().__init__(f"invalid http method: {method}")
        self.method = method


class DuplicateRouteError(RegistrationError):
    def __init__(self, method: str, path: str) -> None:
        super().__init__(f"route already registered: {method} {path}")
        self.method = method
        self.path = path


class DecoderRequiredError(RegistrationError):
    """A handler was built without a decoder or an encoder."""


class SignatureError(RegistrationError):
    """The callable's parameter or return shape cannot be bound to a request."""

    def __init__(self, message: str, *, index: int | None = None, annotation: Any = None) -> None:
        super().__init__(message)
        self.index = index
        self.annotation = annotation


class TooManyParametersError(SignatureError):
    pass


class TooManyReturnValuesError(SignatureError):
    pass


class DuplicateRoleError(SignatureError):
    pass


class WrongPositionError(SignatureError):
    pass


class UnsupportedTypeError(SignatureError):
    pass


# ---------------------------------------------------------------- request time
class BodyTooLargeError(AutoHTTPError):
    """The request body grew past the configured byte ceiling while reading."""

    def __init__(self, limit: int) -> None:
        super().__init__(f"maximum body size exceeded ({limit} bytes)")
        self.limit = limit


class HTTPError(AutoHTTPError):
    """Error carrying an explicit response status alongside its message."""

    def __init__(self, status: int | Status, message: Any) -> None:
        status_code = ensure_status(status)
        text = str(message)
        super().__init__(text)
        self.status = status_code
        self.message = text
        self.reason = reason_phrase(status_code)

    def to_response_body(self) -> bytes:
        return json_encode({"error": self.message})


class InvocationFault(HTTPError):
    """A handler raised an unexpected exception; the original is kept as ``__cause__``."""

    def __init__(self, message: str = "internal error during route execution") -> None:
        super().__init__(Status.INTERNAL_SERVER_ERROR, message)


class EncodeError(HTTPError):
    """The handler's result could not be serialized."""

    def __init__(self, message: str) -> None:
        super().__init__(Status.INTERNAL_SERVER_ERROR, message)


__all__ = [
    "AutoHTTPError",
    "BodyTooLargeError",
    "DecoderRequiredError",
    "DuplicateRoleError",
    "DuplicateRouteError",
    "EncodeError",
    "HTTPError",
    "InvalidMethodError",
    "InvocationFault",
    "RegistrationError",
    "SignatureError",
    "TooManyParametersError",
    "TooManyReturnValuesError",
    "UnsupportedTypeError",
    "WrongPositionError",
]
