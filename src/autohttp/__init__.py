"""Turn typed Python functions into HTTP handlers."""

from .config import RouterConfig
from .context import Context, RequestContext
from .decoders import JSONDecoder, NoOpDecoder
from .encoders import JSONEncoder, NoOpEncoder
from .exceptions import (
    AutoHTTPError,
    DuplicateRoleError,
    DuplicateRouteError,
    HTTPError,
    InvalidMethodError,
    RegistrationError,
    SignatureError,
    TooManyParametersError,
    TooManyReturnValuesError,
    UnsupportedTypeError,
    WrongPositionError,
)
from .handler import Handler
from .headers import Header
from .requests import Request
from .responses import JSONResponse, Response, default_error_handler
from .routing import Router
from .signature import HandlerSignature, inspect_handler, validate
from .static import StaticAssets
from .testing import TestClient

__all__ = [
    "AutoHTTPError",
    "Context",
    "DuplicateRoleError",
    "DuplicateRouteError",
    "HTTPError",
    "Handler",
    "HandlerSignature",
    "Header",
    "InvalidMethodError",
    "JSONDecoder",
    "JSONEncoder",
    "JSONResponse",
    "NoOpDecoder",
    "NoOpEncoder",
    "RegistrationError",
    "Request",
    "RequestContext",
    "Response",
    "Router",
    "RouterConfig",
    "SignatureError",
    "StaticAssets",
    "TestClient",
    "TooManyParametersError",
    "TooManyReturnValuesError",
    "UnsupportedTypeError",
    "WrongPositionError",
    "default_error_handler",
    "inspect_handler",
    "validate",
]
