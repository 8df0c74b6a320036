# Error taxonomy shared by the search pipeline and the HTTP layer.
# Every failure that reaches a caller is one of three kinds.

from __future__ import annotations
from enum import Enum


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    USER = "user"
    INTERNAL = "internal"


class SearchError(Exception):
    """Base for errors reported to callers as {kind, message}."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(SearchError):
    kind = ErrorKind.CONFIGURATION


class UserError(SearchError):
    kind = ErrorKind.USER


class InternalError(SearchError):
    """Opaque to the client; the cause is chained and logged server-side."""

    kind = ErrorKind.INTERNAL

    def __init__(self, message: str = "internal error"):
        super().__init__(message)


class DecodeError(ValueError):
    """A candidate payload is missing a field or holds a malformed value."""

    def __init__(self, field: str, reason: str):
        super().__init__(f"field {field!r}: {reason}")
        self.field = field
        self.reason = reason


class QueryParseError(ValueError):
    pass


class EmbeddingError(RuntimeError):
    pass
