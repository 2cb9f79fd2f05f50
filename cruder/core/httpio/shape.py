from __future__ import annotations

import dataclasses
import types
import typing
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Annotated, List, Optional, Tuple, Union

from pydantic import BaseModel

from .annotations import SourceKind, find_json_name, find_source, is_unsigned
from .errors import InvalidDestination, UnsupportedType


class ScalarKind(str, Enum):
    STR = "str"
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    BOOL = "bool"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class FieldShape:
    attr: str
    segment: str
    kind: SourceKind
    json_name: Optional[str]
    annotation: Any
    record: Optional[type] = None
    optional: bool = False
    scalar: ScalarKind = ScalarKind.UNSUPPORTED

    @property
    def is_record(self) -> bool:
        return self.record is not None


@dataclass(frozen=True)
class RecordShape:
    cls: type
    fields: Tuple[FieldShape, ...]


def is_record_type(tp: Any) -> bool:
    return isinstance(tp, type) and (issubclass(tp, BaseModel) or dataclasses.is_dataclass(tp))


def is_record(value: Any) -> bool:
    return not isinstance(value, type) and is_record_type(type(value))


def is_frozen(value: Any) -> bool:
    cls = type(value)
    if issubclass(cls, BaseModel):
        return bool(cls.model_config.get("frozen"))
    params = getattr(cls, "__dataclass_params__", None)
    return bool(params is not None and params.frozen)


def ensure_destination(dest: Any) -> None:
    if dest is None or isinstance(dest, type):
        raise InvalidDestination(f"destination must be a record instance, not {dest!r}")
    if not is_record(dest):
        raise UnsupportedType(f"unsupported destination type: {type(dest).__name__}")
    if is_frozen(dest):
        raise InvalidDestination(f"destination {type(dest).__name__} is frozen")


def _split_annotated(tp: Any) -> Tuple[Any, List[object]]:
    if typing.get_origin(tp) is Annotated:
        base, *meta = typing.get_args(tp)
        inner, inner_meta = _split_annotated(base)
        return inner, list(meta) + inner_meta
    return tp, []


def _unwrap_optional(tp: Any) -> Tuple[Any, bool]:
    origin = typing.get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1 and len(typing.get_args(tp)) == 2:
            return args[0], True
    return tp, False


def _scalar_kind(tp: Any, metadata: List[object]) -> ScalarKind:
    if tp is str:
        return ScalarKind.STR
    if tp is bool:
        return ScalarKind.BOOL
    if tp is int:
        return ScalarKind.UINT if is_unsigned(metadata) else ScalarKind.INT
    if tp is float:
        return ScalarKind.FLOAT
    return ScalarKind.UNSUPPORTED


def _field_shape(attr: str, annotation: Any, metadata: List[object]) -> FieldShape:
    base, extra = _split_annotated(annotation)
    metadata = list(metadata) + extra

    inner, optional = _unwrap_optional(base)
    inner, inner_meta = _split_annotated(inner)
    metadata += inner_meta

    segment, kind = find_source(metadata)
    json_name = find_json_name(metadata)

    if is_record_type(inner):
        return FieldShape(
            attr=attr,
            segment=segment,
            kind=kind,
            json_name=json_name,
            annotation=annotation,
            record=inner,
            optional=optional,
        )

    return FieldShape(
        attr=attr,
        segment=segment,
        kind=kind,
        json_name=json_name,
        annotation=annotation,
        optional=optional,
        scalar=_scalar_kind(inner, metadata),
    )


@lru_cache(maxsize=None)
def record_shape(cls: type) -> RecordShape:
    """
    Ordered field descriptors of a pydantic model or dataclass, computed once per class.

    Nested record types are stored as classes and resolved lazily through this
    same cache, so self-referencing models do not recurse here.
    """
    if isinstance(cls, type) and issubclass(cls, BaseModel):
        fields = tuple(
            _field_shape(name, info.annotation, list(info.metadata))
            for name, info in cls.model_fields.items()
        )
        return RecordShape(cls=cls, fields=fields)

    if dataclasses.is_dataclass(cls):
        hints = typing.get_type_hints(cls, include_extras=True)
        fields = tuple(
            _field_shape(f.name, hints.get(f.name, f.type), [])
            for f in dataclasses.fields(cls)
        )
        return RecordShape(cls=cls, fields=fields)

    raise TypeError(f"not a record type: {cls!r}")
