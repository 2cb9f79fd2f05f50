from __future__ import annotations

from typing import Callable, List, Optional, Tuple

from starlette.datastructures import QueryParams
from starlette.requests import Request, cookie_parser

from .annotations import SourceKind
from .name_path import NamePath

Resolved = Tuple[str, bool]
PathLookup = Callable[[Request, str], Resolved]


def default_path_lookup(request: Request, name: str) -> Resolved:
    return "", False


def path_params_lookup(request: Request, name: str) -> Resolved:
    """Path lookup for requests routed by Starlette/FastAPI."""
    params = request.path_params or {}
    if name not in params:
        return "", False
    return str(params[name]), True


def find_cookie(request: Request, name: str) -> Optional[str]:
    """Scans the request's Cookie headers for ``name``; first match wins."""
    for raw in request.headers.getlist("cookie"):
        cookies = cookie_parser(raw)
        if name in cookies:
            return cookies[name]
    return None


class DecodeContext:
    """State for a single unmarshal call. Never shared between calls."""

    def __init__(self, request: Request, name_path: NamePath, path_lookup: PathLookup = default_path_lookup):
        self.request = request
        self.name_path = name_path
        self.path_lookup = path_lookup
        self.query_vals: Optional[QueryParams] = None
        self.parsed_cookies: List[Tuple[str, str]] = []
        self.allocating: List[type] = []
        self.writes = 0

    def query(self, name: str) -> Resolved:
        if self.query_vals is None:
            self.query_vals = QueryParams(self.request.scope.get("query_string", b""))
        vals = self.query_vals.getlist(name)
        if not vals:
            return "", False
        return vals[0], True

    def path(self, name: str) -> Resolved:
        return self.path_lookup(self.request, name)

    def header(self, name: str) -> Resolved:
        # Headers always count as present; a missing one reads as "".
        return self.request.headers.get(name, ""), True

    def _cached_cookie(self, name: str) -> Resolved:
        for cookie_name, value in self.parsed_cookies:
            if cookie_name == name:
                return value, True
        return "", False

    def cookie(self, name: str) -> Resolved:
        value, ok = self._cached_cookie(name)
        if ok:
            return value, True
        found = find_cookie(self.request, name)
        if found is None:
            return "", False
        self.parsed_cookies.append((name, found))
        return found, True

    def resolve(self, kind: SourceKind, name: str) -> Resolved:
        if kind is SourceKind.QUERY:
            return self.query(name)
        if kind is SourceKind.PATH:
            return self.path(name)
        if kind is SourceKind.HEADER:
            return self.header(name)
        if kind is SourceKind.COOKIE:
            return self.cookie(name)
        return "", False
