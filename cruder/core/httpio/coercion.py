from __future__ import annotations

import math
import re
from typing import Optional, Union

from .errors import InvalidNumber, UnsupportedType
from .shape import ScalarKind

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1
UINT64_MAX = (1 << 64) - 1

_INT_RE = re.compile(r"[+-]?[0-9]+")
_UINT_RE = re.compile(r"[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)

Scalar = Union[str, int, float, bool]


def _invalid(kind: str, raw: str, field: Optional[str], cause: Exception) -> InvalidNumber:
    label = f" for {field}" if field else ""
    return InvalidNumber(f"invalid {kind} value {raw!r}{label}: {cause}", field=field, value=raw)


def parse_int(raw: str, *, field: Optional[str] = None) -> int:
    try:
        if not _INT_RE.fullmatch(raw):
            raise ValueError("invalid syntax")
        v = int(raw, 10)
        if v < INT64_MIN or v > INT64_MAX:
            raise ValueError("value out of range")
    except ValueError as e:
        raise _invalid("integer", raw, field, e) from e
    return v


def parse_uint(raw: str, *, field: Optional[str] = None) -> int:
    try:
        if not _UINT_RE.fullmatch(raw):
            raise ValueError("invalid syntax")
        v = int(raw, 10)
        if v > UINT64_MAX:
            raise ValueError("value out of range")
    except ValueError as e:
        raise _invalid("unsigned integer", raw, field, e) from e
    return v


def parse_float(raw: str, *, field: Optional[str] = None) -> float:
    try:
        if not _FLOAT_RE.fullmatch(raw):
            raise ValueError("invalid syntax")
        v = float(raw)
        # float() saturates large finite literals to inf
        if math.isinf(v) and "inf" not in raw.lower():
            raise ValueError("value out of range")
    except ValueError as e:
        raise _invalid("float", raw, field, e) from e
    return v


def parse_bool(raw: str) -> bool:
    # Only the exact literal "true" is truthy; this never fails.
    return raw == "true"


def coerce(kind: ScalarKind, raw: str, *, field: Optional[str] = None) -> Scalar:
    """Converts a raw request string into the Python value for ``kind``."""
    if kind is ScalarKind.STR:
        return raw
    if kind is ScalarKind.INT:
        return parse_int(raw, field=field)
    if kind is ScalarKind.UINT:
        return parse_uint(raw, field=field)
    if kind is ScalarKind.FLOAT:
        return parse_float(raw, field=field)
    if kind is ScalarKind.BOOL:
        return parse_bool(raw)
    raise UnsupportedType(f"unsupported type for field {field!r}", field=field)
