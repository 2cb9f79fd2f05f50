from __future__ import annotations

import json
from functools import lru_cache
from typing import Any, Dict

from pydantic import TypeAdapter, ValidationError
from starlette.requests import Request

from .annotations import SourceKind
from .errors import BodyDecodeError
from .shape import ensure_destination, is_frozen, record_shape

JSON_CONTENT_TYPE = "application/json"


def wants_json_body(request: Request) -> bool:
    # Exact match only: parameters such as "; charset=utf-8" disable the body decode.
    return request.headers.get("content-type") == JSON_CONTENT_TYPE


@lru_cache(maxsize=512)
def _adapter(annotation: Any) -> TypeAdapter:
    return TypeAdapter(annotation)


async def read_json_body(request: Request) -> Any:
    body = await request.body()
    try:
        return json.loads(body)
    except ValueError as e:
        raise BodyDecodeError(f"invalid JSON body: {e}") from e


def merge_json(dest: Any, payload: Any) -> None:
    """
    Writes a decoded JSON document into ``dest``.

    Only fields without a query/path/header/cookie marker are considered. Their
    key is the Json marker name or, failing that, the attribute name. Nested
    records that already hold an instance are merged in place; everything else
    is validated by pydantic against the declared type and assigned.
    """
    if payload is None:
        return
    ensure_destination(dest)
    if not isinstance(payload, dict):
        raise BodyDecodeError(f"JSON body must be an object, got {type(payload).__name__}")
    _merge(dest, payload, "")


def _merge(dest: Any, payload: Dict[str, Any], prefix: str) -> None:
    for f in record_shape(type(dest)).fields:
        if f.kind is not SourceKind.NONE:
            continue
        key = f.json_name or f.attr
        if key not in payload:
            continue
        value = payload[key]

        current = getattr(dest, f.attr, None)
        if f.is_record and isinstance(value, dict) and current is not None and not is_frozen(current):
            _merge(current, value, f"{prefix}{key}.")
            continue

        try:
            setattr(dest, f.attr, _adapter(f.annotation).validate_python(value))
        except ValidationError as e:
            raise BodyDecodeError(f"invalid JSON value for {prefix}{key}: {e.errors()[0]['msg']}") from e
