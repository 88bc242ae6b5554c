"""JSON wire format for queries and results."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from tf_external.errors import ProtocolError, QueryEncodingError
from tf_external.models import FailureKind


def encode_query(query: Mapping[str, str], *, attribute: str = "query") -> bytes:
    """Serialize a query as one compact JSON object; empty maps become ``{}``."""

    for key, value in query.items():
        if not isinstance(key, str):
            raise QueryEncodingError(
                f"Query keys must be strings, got {type(key).__name__}: {key!r}",
                attribute=attribute,
            )
        if not isinstance(value, str):
            raise QueryEncodingError(
                f"Query value for {key!r} must be a string, got {type(value).__name__}",
                attribute=attribute,
            )
    try:
        return json.dumps(dict(query), ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as error:
        raise QueryEncodingError(str(error), attribute=attribute) from error


def decode_result(
    output: bytes | str,
    *,
    attribute: str = "program",
    program: str = "",
) -> dict[str, str]:
    """Parse program output and validate it is a flat object of strings."""

    try:
        raw = json.loads(output)
    except (ValueError, RecursionError) as error:
        # ValueError also covers undecodable bytes and oversized integer literals
        raise ProtocolError(
            f"Output is not valid JSON: {error}",
            kind=FailureKind.MALFORMED_OUTPUT,
            attribute=attribute,
            program=program,
        ) from error

    if not isinstance(raw, dict):
        raise ProtocolError(
            f"Output must be a JSON object, got {_json_type(raw)}",
            kind=FailureKind.INVALID_SHAPE,
            attribute=attribute,
            program=program,
        )

    for key, value in raw.items():
        if not isinstance(value, str):
            raise ProtocolError(
                f"Output value for {key!r} must be a string, got {_json_type(value)}",
                kind=FailureKind.INVALID_SHAPE,
                attribute=attribute,
                program=program,
            )
    return raw


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"
