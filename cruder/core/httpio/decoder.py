from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import ValidationError
from starlette.requests import Request

from cruder.core.config import DecoderSettings

from .annotations import SourceKind
from .coercion import coerce
from .errors import DecodeError, InvalidDestination, InvalidValue, UnsupportedType
from .json_body import merge_json, read_json_body, wants_json_body
from .name_path import NamePathPool
from .resolvers import DecodeContext, PathLookup, default_path_lookup
from .shape import FieldShape, RecordShape, ensure_destination, is_frozen, is_record, record_shape

log = logging.getLogger("cruder.decode")


class Decoder:
    """
    Fills a record from the query string, path variables, headers and cookies
    of a request, after an optional whole-body JSON decode.

    ``path_lookup`` is fixed at construction. Routers that know their path
    variables pass their own; the default never finds anything.
    """

    __slots__ = ("_path_lookup", "_pool")

    def __init__(self, *, path_lookup: Optional[PathLookup] = None, pool: Optional[NamePathPool] = None):
        self._path_lookup: PathLookup = path_lookup or default_path_lookup
        self._pool = pool if pool is not None else NamePathPool()

    @property
    def path_lookup(self) -> PathLookup:
        return self._path_lookup

    async def unmarshal(self, request: Request, dest: Any) -> None:
        try:
            if wants_json_body(request):
                merge_json(dest, await read_json_body(request))
            self._decode(request, dest)
        except DecodeError as e:
            log.debug("decode failed kind=%s path=%s: %s", e.kind, request.url.path, e)
            raise

    def decode_sources(self, request: Request, dest: Any) -> None:
        """Runs only the query/path/header/cookie pass; the body is never read."""
        self._decode(request, dest)

    def _decode(self, request: Request, dest: Any) -> None:
        ensure_destination(dest)

        with self._pool.borrow() as name_path:
            ctx = DecodeContext(request, name_path, self._path_lookup)
            self._walk(ctx, dest, record_shape(type(dest)))

    def _walk(self, ctx: DecodeContext, dest: Any, shape: RecordShape) -> int:
        written = 0
        for f in shape.fields:
            if f.kind is SourceKind.NONE:
                continue

            if f.is_record:
                mark = ctx.name_path.push(f.segment)
                written += self._walk_nested(ctx, dest, f)
                ctx.name_path.truncate(mark)
                continue

            mark = ctx.name_path.append(f.segment)
            name = ctx.name_path.value()
            raw, ok = ctx.resolve(f.kind, name)
            ctx.name_path.truncate(mark)
            if not ok:
                continue

            _assign(dest, f.attr, coerce(f.scalar, raw, field=name), field=name, raw=raw)
            ctx.writes += 1
            written += 1
        return written

    def _walk_nested(self, ctx: DecodeContext, dest: Any, f: FieldShape) -> int:
        current = getattr(dest, f.attr, None)
        if current is not None:
            if not is_record(current):
                raise UnsupportedType(f"field {f.attr!r} does not hold a record", field=f.attr)
            if is_frozen(current):
                raise InvalidDestination(f"nested record {f.attr!r} is frozen")
            return self._walk(ctx, current, record_shape(type(current)))

        # Optional record left empty: fill a fresh instance, keep it only if
        # something was written. A type already being allocated up the stack
        # is not allocated again.
        if f.record in ctx.allocating:
            return 0
        try:
            fresh = f.record()
        except (TypeError, ValidationError) as e:
            raise UnsupportedType(f"cannot create default {f.record.__name__} for field {f.attr!r}", field=f.attr) from e

        before = ctx.writes
        ctx.allocating.append(f.record)
        try:
            written = self._walk(ctx, fresh, record_shape(f.record))
        except DecodeError:
            # Fields written before the failure stay visible, as they do on
            # records that were already present.
            if ctx.writes > before:
                _assign(dest, f.attr, fresh, field=f.attr, raw="")
            raise
        finally:
            ctx.allocating.pop()
        if written:
            _assign(dest, f.attr, fresh, field=f.attr, raw="")
        return written


def _assign(dest: Any, attr: str, value: Any, *, field: str, raw: str) -> None:
    # validate_assignment models and frozen fields reject values through pydantic.
    try:
        setattr(dest, attr, value)
    except ValidationError as e:
        raise InvalidValue(f"invalid value {raw!r} for {field}: {e.errors()[0]['msg']}", field=field, value=raw) from e


default_decoder = Decoder(pool=NamePathPool(max_idle=DecoderSettings.from_env().name_path_pool_size))


async def unmarshal(request: Request, dest: Any) -> None:
    """Decodes ``request`` into ``dest`` with the default decoder (no path variables)."""
    await default_decoder.unmarshal(request, dest)
