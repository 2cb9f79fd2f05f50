from __future__ import annotations

from typing import Annotated, Optional

from pydantic import BaseModel, Field

from cruder.api.mux import Mux
from cruder.core.httpio import Cookie, Header, Json, Path, Query


class EchoRequest(BaseModel):
    name: Annotated[str, Json("name")] = ""


class EchoResponse(BaseModel):
    name: str


class FullName(BaseModel):
    first: Annotated[str, Query("first")] = ""
    last: Annotated[str, Query("last")] = ""
    middle: Annotated[Optional[str], Query("middle")] = None


class GetEchoRequest(BaseModel):
    name: Annotated[FullName, Query("name")] = Field(default_factory=FullName)


class UserRequest(BaseModel):
    user_id: Annotated[int, Path("user_id")] = 0
    verbose: Annotated[bool, Query("verbose")] = False
    agent: Annotated[str, Header("User-Agent")] = ""
    session: Annotated[Optional[str], Cookie("session")] = None


class UserResponse(BaseModel):
    user_id: int
    verbose: bool
    agent: str
    has_session: bool


def echo(req: EchoRequest) -> EchoResponse:
    return EchoResponse(name=req.name)


# GET /echo?name.first=John&name.last=Doe -> {"name": "John Doe"}
def get_echo(req: GetEchoRequest) -> EchoResponse:
    name = req.name.first + " " + req.name.last
    if req.name.middle is not None:
        name += " " + req.name.middle
    return EchoResponse(name=name)


async def get_user(req: UserRequest) -> UserResponse:
    return UserResponse(
        user_id=req.user_id,
        verbose=req.verbose,
        agent=req.agent,
        has_session=req.session is not None,
    )


def register(mux: Mux) -> None:
    mux.register("POST /echo", echo, EchoRequest)
    mux.register("GET /echo", get_echo, GetEchoRequest)
    mux.register("GET /users/{user_id}", get_user, UserRequest)
