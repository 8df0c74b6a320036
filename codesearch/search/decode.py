# Payload decoder, turning a RawCandidate into a Snippet.
# All-or-nothing; the first missing or malformed field raises DecodeError.

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np

from codesearch.errors import DecodeError
from .types import RawCandidate, Snippet

# payload key -> Snippet attribute
STRING_FIELDS = {
    "lang": "lang",
    "repo_name": "repo_name",
    "repo_ref": "repo_ref",
    "relative_path": "relative_path",
    "snippet": "text",
}
NUMERIC_FIELDS = ("start_line", "end_line", "start_byte", "end_byte")
REQUIRED_FIELDS = tuple(STRING_FIELDS) + NUMERIC_FIELDS


def _string_value(payload: Dict[str, Any], key: str) -> str:
    if key not in payload:
        raise DecodeError(key, "missing")
    value = payload[key]
    if not isinstance(value, str):
        raise DecodeError(key, f"expected string, got {type(value).__name__}")
    if not value:
        raise DecodeError(key, "empty")
    return value


def _uint_value(payload: Dict[str, Any], key: str) -> int:
    value = _string_value(payload, key)
    # str.isdigit alone accepts non-ASCII digits that int() rejects
    if not (value.isascii() and value.isdigit()):
        raise DecodeError(key, f"not a non-negative integer: {value!r}")
    return int(value)


def extract_vector(vector: Any, dim: Optional[int] = None) -> Tuple[float, ...]:
    """Dense 1-D float vector from a candidate, or DecodeError."""
    if vector is None:
        raise DecodeError("vector", "missing")
    if isinstance(vector, (dict, str, bytes)):
        raise DecodeError("vector", f"not a dense vector ({type(vector).__name__})")
    try:
        arr = np.asarray(vector, dtype=np.float32)
    except (TypeError, ValueError) as e:
        raise DecodeError("vector", f"not numeric: {e}") from e
    if arr.ndim != 1 or arr.size == 0:
        raise DecodeError("vector", f"expected a non-empty 1-D vector, got shape {arr.shape}")
    if not np.isfinite(arr).all():
        raise DecodeError("vector", "non-finite values")
    if dim is not None and arr.size != dim:
        raise DecodeError("vector", f"dimension {arr.size} != index dimension {dim}")
    return tuple(float(x) for x in arr)


def decode_payload(payload: Dict[str, Any]) -> Tuple[Dict[str, str], Dict[str, int]]:
    """Check every required payload field; returns (string attrs, numeric fields)."""
    strings = {attr: _string_value(payload, key) for key, attr in STRING_FIELDS.items()}
    nums = {key: _uint_value(payload, key) for key in NUMERIC_FIELDS}

    if nums["end_line"] < nums["start_line"]:
        raise DecodeError("end_line", "precedes start_line")
    if nums["end_byte"] < nums["start_byte"]:
        raise DecodeError("end_byte", "precedes start_byte")
    return strings, nums


def decode_candidate(candidate: RawCandidate, dim: Optional[int] = None) -> Snippet:
    strings, nums = decode_payload(candidate.payload)

    embedding = extract_vector(candidate.vector, dim=dim)

    return Snippet(
        **strings,
        **nums,
        score=float(candidate.score),
        embedding=embedding,
    )
