from __future__ import annotations

from typing import Optional


class DecodeError(Exception):
    """Base class for everything unmarshal raises."""

    kind = "decode_error"


class InvalidDestination(DecodeError):
    kind = "invalid_destination"


class BodyDecodeError(DecodeError):
    kind = "body_decode_error"


class UnsupportedType(DecodeError):
    kind = "unsupported_type"

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidNumber(DecodeError):
    kind = "invalid_number"

    def __init__(self, message: str, *, field: Optional[str] = None, value: str = ""):
        super().__init__(message)
        self.field = field
        self.value = value


class InvalidValue(DecodeError):
    """The destination rejected an assignment (pydantic validate_assignment, frozen field)."""

    kind = "invalid_value"

    def __init__(self, message: str, *, field: Optional[str] = None, value: str = ""):
        super().__init__(message)
        self.field = field
        self.value = value
