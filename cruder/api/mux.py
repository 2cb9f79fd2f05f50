from __future__ import annotations

import inspect
import logging
import traceback
from typing import Any, Callable, Optional, Type

from fastapi import APIRouter, Request
from fastapi.encoders import jsonable_encoder
from starlette.responses import JSONResponse, Response

from cruder.api.observability.metrics import DECODE_TOTAL
from cruder.core.config import DecoderSettings
from cruder.core.httpio import DecodeError, Decoder, NamePathPool, path_params_lookup

log = logging.getLogger("cruder.mux")


def _json_log(event: str, **fields):
    msg = {"event": event, **fields}
    log.info("%s", msg)


def split_pattern(pattern: str) -> tuple[str, str]:
    """'GET /users/{user_id}' -> ('GET', '/users/{user_id}')"""
    method, sep, path = pattern.partition(" ")
    if not sep or not method or not path.startswith("/"):
        raise ValueError(f"invalid pattern: {pattern!r} (expected 'METHOD /path')")
    return method.upper(), path


class Mux:
    """
    Registers typed handlers on a FastAPI router.

    Each request is decoded into a fresh ``request_model()`` before the handler
    runs; the decoder resolves path variables from the matched route.
    """

    def __init__(self, *, decoder: Optional[Decoder] = None, settings: Optional[DecoderSettings] = None):
        self.settings = settings or DecoderSettings.from_env()
        self.decoder = decoder or Decoder(
            path_lookup=path_params_lookup,
            pool=NamePathPool(max_idle=self.settings.name_path_pool_size),
        )
        self.router = APIRouter()

    def _count(self, outcome: str) -> None:
        if self.settings.decode_metrics_enabled:
            DECODE_TOTAL.labels(outcome=outcome).inc()

    def register(self, pattern: str, handler: Callable[[Any], Any], request_model: Type[Any]) -> None:
        method, path = split_pattern(pattern)

        async def endpoint(request: Request) -> Response:
            req = request_model()
            try:
                await self.decoder.unmarshal(request, req)
            except DecodeError as e:
                self._count(e.kind)
                _json_log(
                    "decode_rejected",
                    route=pattern,
                    kind=e.kind,
                    request_id=getattr(request.state, "request_id", None),
                )
                return JSONResponse(status_code=400, content={"detail": str(e)})
            self._count("ok")

            try:
                resp = handler(req)
                if inspect.isawaitable(resp):
                    resp = await resp
            except Exception as e:
                log.error("Handler error: %s route=%s\n%s", str(e), pattern, traceback.format_exc())
                return JSONResponse(status_code=500, content={"detail": str(e)})

            return JSONResponse(content=jsonable_encoder(resp))

        endpoint.__name__ = getattr(handler, "__name__", "endpoint")
        self.router.add_api_route(path, endpoint, methods=[method], name=pattern)
