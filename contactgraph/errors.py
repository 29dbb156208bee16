"""
Error taxonomy shared by the store, the auth service and the resolvers.

Every error carries a machine-readable ``kind`` and an ``extensions``
dict.  GraphQL execution copies an exception's ``extensions`` attribute
into the error it reports, so clients always receive::

    {"message": "...", "path": [...], "extensions": {"code": "UNAUTHENTICATED"}}

Lookups that find nothing are not errors; they return ``None``.
"""
from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Machine-readable error codes."""
    UNAUTHENTICATED = "UNAUTHENTICATED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_TOKEN = "INVALID_TOKEN"
    VALIDATION_ERROR = "VALIDATION_ERROR"


class ContactGraphError(Exception):
    """Base class for all structured contactgraph failures."""

    kind: ErrorKind = ErrorKind.VALIDATION_ERROR

    def __init__(self, message: str, kind: ErrorKind | None = None) -> None:
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind

    @property
    def extensions(self) -> dict[str, Any]:
        return {"code": self.kind.value}


class AuthError(ContactGraphError):
    """Authentication failures: missing identity, bad login, bad token."""

    kind = ErrorKind.UNAUTHENTICATED

    @classmethod
    def unauthenticated(cls) -> AuthError:
        return cls("not authenticated", ErrorKind.UNAUTHENTICATED)

    @classmethod
    def invalid_credentials(cls) -> AuthError:
        return cls("wrong credentials", ErrorKind.INVALID_CREDENTIALS)

    @classmethod
    def invalid_token(cls, reason: str = "") -> AuthError:
        message = "invalid token"
        if reason:
            message = f"invalid token: {reason}"
        return cls(message, ErrorKind.INVALID_TOKEN)


class ValidationError(ContactGraphError):
    """A write rejected by the record store.

    Attributes:
        invalid_args: the operation arguments that produced the failure,
            echoed back so the client can correct them.
        field_errors: per-field messages reported by the store.
    """

    kind = ErrorKind.VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        invalid_args: dict[str, Any] | None = None,
        field_errors: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.invalid_args = dict(invalid_args or {})
        self.field_errors = dict(field_errors or {})

    @property
    def extensions(self) -> dict[str, Any]:
        ext: dict[str, Any] = {"code": self.kind.value}
        if self.invalid_args:
            ext["invalidArgs"] = self.invalid_args
        if self.field_errors:
            ext["fieldErrors"] = self.field_errors
        return ext

    def with_args(self, invalid_args: dict[str, Any]) -> ValidationError:
        """Return a copy carrying the caller's original arguments."""
        return ValidationError(self.message, invalid_args, self.field_errors)
