from __future__ import annotations

from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from cruder.api.endpoints import echo
from cruder.api.middleware.error_shaping import SafeErrorMiddleware
from cruder.api.middleware.request_context import RequestContextMiddleware
from cruder.api.mux import Mux
from cruder.core.config import DecoderSettings

settings = DecoderSettings.from_env()

app = FastAPI(
    title="cruder",
    version="0.1.0",
)

# ------------------------------------------------------------
# Middleware stack (ORDER MATTERS)
# Starlette reverses add_middleware order: the LAST call is the OUTERMOST wrapper.
#   SafeErrorMiddleware -> RequestContext -> handler
# ------------------------------------------------------------
app.add_middleware(RequestContextMiddleware)
app.add_middleware(SafeErrorMiddleware)

mux = Mux(settings=settings)
echo.register(mux)

app.include_router(mux.router)


@app.get("/health")
def health_check():
    return {"status": "healthy"}


@app.get("/metrics", include_in_schema=False)
def prometheus_metrics() -> Response:
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
