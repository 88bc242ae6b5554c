from __future__ import annotations

import json

import allure
import pytest

from tf_external.codec import decode_result, encode_query
from tf_external.errors import ProtocolError, QueryEncodingError
from tf_external.models import FailureKind

pytestmark = [
    allure.epic("Wire Protocol"),
    allure.feature("Query & Result Codec"),
]


def test_empty_query_encodes_to_empty_object() -> None:
    assert encode_query({}) == b"{}"


def test_query_encodes_compactly_as_utf8() -> None:
    payload = encode_query({"a": "b", "name": "Zoë"})

    assert b" " not in payload
    assert json.loads(payload.decode("utf-8")) == {"a": "b", "name": "Zoë"}


def test_encode_then_decode_is_identity_up_to_key_order() -> None:
    query = {"z": "1", "a": "", "quote": 'say "hi"', "nl": "line\nbreak"}

    assert decode_result(encode_query(query)) == query


def test_encode_rejects_non_string_value_with_query_attribute() -> None:
    with pytest.raises(QueryEncodingError, match="must be a string") as excinfo:
        encode_query({"count": 3}, attribute="query_destroy")  # type: ignore[dict-item]

    assert excinfo.value.kind == FailureKind.QUERY_ENCODING
    assert excinfo.value.attribute == "query_destroy"


def test_decode_accepts_flat_string_object() -> None:
    assert decode_result(b'{"x": "1", "y": ""}') == {"x": "1", "y": ""}


@pytest.mark.parametrize(
    ("output", "json_type"),
    [
        (b"[1,2,3]", "array"),
        (b'"text"', "string"),
        (b'{"a": {"b": "c"}}', "object"),
        (b'{"a": ["b"]}', "array"),
        (b'{"a": 1}', "number"),
        (b'{"a": true}', "boolean"),
        (b'{"a": null}', "null"),
    ],
)
def test_decode_rejects_non_flat_shapes_without_coercion(output: bytes, json_type: str) -> None:
    with pytest.raises(ProtocolError, match=json_type) as excinfo:
        decode_result(output, program="/bin/prog")

    assert excinfo.value.kind == FailureKind.INVALID_SHAPE
    assert excinfo.value.program == "/bin/prog"


@pytest.mark.parametrize(
    "output",
    [
        b"not json",
        b"",
        b'{"a": "b"',
        b"\xff\xfe\xfa",
        b'{"a": ' + b"1" * 5000 + b"}",
        b"[" * 200_000 + b"]" * 200_000,
    ],
    ids=["text", "empty", "truncated", "bad-utf8", "huge-integer", "deep-nesting"],
)
def test_decode_reports_malformed_output(output: bytes) -> None:
    with pytest.raises(ProtocolError) as excinfo:
        decode_result(output, attribute="program_destroy")

    assert excinfo.value.kind == FailureKind.MALFORMED_OUTPUT
    assert excinfo.value.attribute == "program_destroy"
