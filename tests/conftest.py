import os
from urllib.parse import urlsplit

import pytest
from fastapi.testclient import TestClient
from starlette.requests import Request


@pytest.fixture(scope="session", autouse=True)
def _force_test_env():
    # Make runtime behave deterministically in tests
    os.environ.setdefault("CRUDER_DECODE_METRICS_ENABLED", "1")


@pytest.fixture()
def client():
    from cruder.api.main import app

    return TestClient(app)


@pytest.fixture()
def make_request():
    """
    Builds a bare Starlette request.

    headers: dict or list of (name, value) pairs; a list allows repeated
    headers such as several Cookie lines.
    """

    def _make(url="/", *, method="GET", headers=None, body=b"", path_params=None):
        parts = urlsplit(url)
        items = headers.items() if isinstance(headers, dict) else (headers or [])
        raw_headers = [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in items]
        if isinstance(body, str):
            body = body.encode("utf-8")

        scope = {
            "type": "http",
            "method": method,
            "scheme": "http",
            "server": ("testserver", 80),
            "path": parts.path or "/",
            "root_path": "",
            "query_string": parts.query.encode("latin-1"),
            "headers": raw_headers,
            "path_params": path_params or {},
        }

        sent = {"done": False}

        async def receive():
            if sent["done"]:
                return {"type": "http.disconnect"}
            sent["done"] = True
            return {"type": "http.request", "body": body, "more_body": False}

        return Request(scope, receive)

    return _make
