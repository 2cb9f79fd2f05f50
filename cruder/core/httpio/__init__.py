from .annotations import Cookie, Header, Json, Path, Query, SourceKind, Uint, Unsigned
from .decoder import Decoder, default_decoder, unmarshal
from .errors import BodyDecodeError, DecodeError, InvalidDestination, InvalidNumber, InvalidValue, UnsupportedType
from .name_path import NamePath, NamePathPool
from .resolvers import DecodeContext, default_path_lookup, path_params_lookup

__all__ = [
    "Query",
    "Path",
    "Header",
    "Cookie",
    "Json",
    "Uint",
    "Unsigned",
    "SourceKind",
    "Decoder",
    "default_decoder",
    "unmarshal",
    "DecodeError",
    "InvalidDestination",
    "BodyDecodeError",
    "UnsupportedType",
    "InvalidNumber",
    "InvalidValue",
    "NamePath",
    "NamePathPool",
    "DecodeContext",
    "default_path_lookup",
    "path_params_lookup",
]
