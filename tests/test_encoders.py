from __future__ import annotations

import msgspec
import pytest

from autohttp.encoders import Encoded, JSONEncoder, NoOpEncoder
from autohttp.exceptions import EncodeError, SignatureError
from autohttp.serialization import json_decode
from autohttp.signature import inspect_handler


class Greeting(msgspec.Struct):
    Greeting: str


def returns_value() -> Greeting:
    return Greeting(Greeting="hi")


def returns_nothing() -> None:
    return None


def test_json_encoder_encodes_values() -> None:
    encoded = JSONEncoder().encode(Greeting(Greeting="Hello, Ada"))
    assert encoded.status == 200
    assert encoded.headers == (("content-type", "application/json"),)
    assert json_decode(encoded.body) == {"Greeting": "Hello, Ada"}


def test_json_encoder_encodes_maps_and_lists() -> None:
    assert JSONEncoder().encode({"test": "booo"}).body == b'{"test":"booo"}'
    assert JSONEncoder().encode([1, 2]).body == b"[1,2]"


def test_json_encoder_no_value_is_no_content() -> None:
    assert JSONEncoder().encode(None) == Encoded(status=204)


def test_json_encoder_wraps_serialization_failures() -> None:
    with pytest.raises(EncodeError) as excinfo:
        JSONEncoder().encode(object())
    assert excinfo.value.status == 500


def test_json_encoder_accepts_every_signature() -> None:
    assert JSONEncoder().validate(inspect_handler(returns_value)) is None


def test_noop_encoder_requires_no_returns() -> None:
    encoder = NoOpEncoder()
    assert encoder.validate(inspect_handler(returns_nothing)) is None
    with pytest.raises(SignatureError):
        encoder.validate(inspect_handler(returns_value))
    assert encoder.encode(None) == Encoded(status=204)
