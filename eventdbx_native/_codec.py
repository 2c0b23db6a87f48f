"""
JSON codec for values crossing the native boundary.

Requests are encoded to UTF-8 JSON bytes entirely in host memory, so a
malformed payload fails here and the native call is never issued.
Responses are decoded only after the native side returned a non-empty
string.
"""

from __future__ import annotations

import json
from typing import Any

from .exceptions import DecodingError, EncodingError

__all__ = ["encode", "decode", "NULL"]

# Wire literal for an absent options/fields argument
NULL = b"null"


def _to_json_compatible(value: Any) -> Any:
    """``default`` hook for json.dumps: option types expose ``to_dict()``."""
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode(value: Any) -> bytes:
    """
    Encode a request value as JSON bytes.

    ``None`` encodes to ``null``. Non-finite floats are rejected rather than
    emitted as the non-standard ``NaN``/``Infinity`` tokens.

    Raises
    ------
        EncodingError: If the value cannot be represented as JSON.
    """
    try:
        text = json.dumps(
            value,
            allow_nan=False,
            ensure_ascii=False,
            separators=(",", ":"),
            default=_to_json_compatible,
        )
    except (ValueError, TypeError, RecursionError) as e:
        raise EncodingError(
            f"Failed to encode request payload to JSON: {e}",
            details={"reason": str(e)},
        ) from e
    return text.encode("utf-8")


def decode(data: bytes | str) -> Any:
    """
    Decode a JSON response payload.

    Raises
    ------
        DecodingError: If the payload is not valid UTF-8 JSON.
    """
    try:
        text = data.decode("utf-8") if isinstance(data, bytes) else data
        return json.loads(text)
    except UnicodeDecodeError as e:
        raise DecodingError(
            f"Failed to decode response JSON: {e}",
            details={"reason": str(e)},
        ) from e
    except json.JSONDecodeError as e:
        raise DecodingError(
            f"Failed to decode response JSON: {e.msg} (line {e.lineno}, column {e.colno})",
            details={"reason": e.msg, "position": e.pos},
        ) from e
