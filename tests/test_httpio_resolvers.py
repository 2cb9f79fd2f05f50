import asyncio
from typing import Annotated, Optional

from pydantic import BaseModel

from cruder.core.httpio import Cookie, DecodeContext, Decoder, NamePath, Path, Query, SourceKind, unmarshal
from cruder.core.httpio import resolvers
from cruder.core.httpio.resolvers import default_path_lookup, path_params_lookup


class RepeatedCookie(BaseModel):
    first: Annotated[str, Cookie("session")] = ""
    second: Annotated[str, Cookie("session")] = ""
    theme: Annotated[Optional[str], Cookie("theme")] = None


class PathInput(BaseModel):
    user_id: Annotated[int, Path("user_id")] = 0
    org: Annotated[str, Path("org")] = "none"


def _counting_find_cookie(monkeypatch):
    calls = []
    real = resolvers.find_cookie

    def counting(request, name):
        calls.append(name)
        return real(request, name)

    monkeypatch.setattr(resolvers, "find_cookie", counting)
    return calls


def test_cookie_lookup_is_cached_within_a_call(make_request, monkeypatch):
    calls = _counting_find_cookie(monkeypatch)

    v = RepeatedCookie()
    asyncio.run(unmarshal(make_request("/", headers={"Cookie": "session=s1"}), v))

    assert v.first == "s1"
    assert v.second == "s1"
    assert v.theme is None
    assert calls == ["session", "theme"]


def test_cookie_miss_is_not_cached(make_request, monkeypatch):
    calls = _counting_find_cookie(monkeypatch)
    ctx = DecodeContext(make_request("/"), NamePath())

    assert ctx.cookie("missing") == ("", False)
    assert ctx.cookie("missing") == ("", False)
    assert calls == ["missing", "missing"]
    assert ctx.parsed_cookies == []


def test_cookie_found_in_later_header(make_request):
    r = make_request("/", headers=[("Cookie", "a=1"), ("Cookie", "b=2")])
    ctx = DecodeContext(r, NamePath())

    assert ctx.cookie("b") == ("2", True)
    assert ctx.parsed_cookies == [("b", "2")]


def test_query_table_built_once(make_request, monkeypatch):
    built = []
    real = resolvers.QueryParams

    def counting(raw):
        built.append(raw)
        return real(raw)

    monkeypatch.setattr(resolvers, "QueryParams", counting)
    ctx = DecodeContext(make_request("/?a=1&b=2&a.b=3"), NamePath())

    assert ctx.query("a") == ("1", True)
    assert ctx.query("a.b") == ("3", True)
    assert ctx.query("zzz") == ("", False)
    assert len(built) == 1


def test_header_always_present(make_request):
    ctx = DecodeContext(make_request("/", headers={"X-One": "1"}), NamePath())

    assert ctx.resolve(SourceKind.HEADER, "x-one") == ("1", True)
    assert ctx.resolve(SourceKind.HEADER, "X-Missing") == ("", True)


def test_default_path_lookup_finds_nothing(make_request):
    r = make_request("/users/5", path_params={"user_id": "5"})
    assert default_path_lookup(r, "user_id") == ("", False)

    v = PathInput()
    asyncio.run(unmarshal(r, v))
    assert v.user_id == 0
    assert v.org == "none"


def test_injected_path_lookup(make_request):
    decoder = Decoder(path_lookup=path_params_lookup)
    r = make_request("/users/5", path_params={"user_id": "5"})

    v = PathInput()
    asyncio.run(decoder.unmarshal(r, v))

    assert decoder.path_lookup is path_params_lookup
    assert v.user_id == 5
    assert v.org == "none"


def test_custom_path_lookup_receives_full_name(make_request):
    seen = []

    def lookup(request, name):
        seen.append(name)
        return name.upper(), True

    class Inner(BaseModel):
        slug: Annotated[str, Path("slug")] = ""

    class Outer(BaseModel):
        inner: Annotated[Inner, Query("post")] = Inner()

    v = Outer()
    Decoder(path_lookup=lookup).decode_sources(make_request("/"), v)

    assert seen == ["post.slug"]
    assert v.inner.slug == "POST.SLUG"
