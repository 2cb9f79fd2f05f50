from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Iterable, Optional, Tuple


class SourceKind(str, Enum):
    NONE = "none"
    QUERY = "query"
    PATH = "path"
    HEADER = "header"
    COOKIE = "cookie"


@dataclass(frozen=True)
class Query:
    name: str
    kind = SourceKind.QUERY


@dataclass(frozen=True)
class Path:
    name: str
    kind = SourceKind.PATH


@dataclass(frozen=True)
class Header:
    name: str
    kind = SourceKind.HEADER


@dataclass(frozen=True)
class Cookie:
    name: str
    kind = SourceKind.COOKIE


@dataclass(frozen=True)
class Json:
    """Key of the field in a whole-body JSON document."""

    name: str


@dataclass(frozen=True)
class Unsigned:
    """Marks an ``int`` field as unsigned for string coercion."""


Uint = Annotated[int, Unsigned()]

# First marker present wins, whatever order it was declared in.
SOURCE_PRIORITY: Tuple[type, ...] = (Query, Path, Header, Cookie)


def find_source(metadata: Iterable[object]) -> Tuple[str, SourceKind]:
    """
    Returns (name, kind) of the source marker that applies to a field.

    Markers with an empty name are ignored; ("", SourceKind.NONE) means the
    field is not filled from a request facet.
    """
    items = list(metadata)
    for marker_cls in SOURCE_PRIORITY:
        for m in items:
            if isinstance(m, marker_cls) and m.name:
                return m.name, m.kind
    return "", SourceKind.NONE


def find_json_name(metadata: Iterable[object]) -> Optional[str]:
    for m in metadata:
        if isinstance(m, Json) and m.name:
            return m.name
    return None


def is_unsigned(metadata: Iterable[object]) -> bool:
    return any(isinstance(m, Unsigned) for m in metadata)
