"""
Error taxonomy for the API bridge.

A closed set of error kinds, each fixing its HTTP status, wire code and
operational flag. Business logic raises ``AppError`` built through one of
the per-kind constructors; the error handler is the only consumer.
No framework imports allowed.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

INTERNAL_MESSAGE = "Internal server error"


class ErrorKind(Enum):
    """Closed set of error variants.

    Each member value is ``(status_code, code, is_operational)``.
    """

    VALIDATION = (400, "VALIDATION_ERROR", True)
    NOT_FOUND = (404, "NOT_FOUND", True)
    UNAUTHORIZED = (401, "UNAUTHORIZED", True)
    FORBIDDEN = (403, "FORBIDDEN", True)
    CONFLICT = (409, "CONFLICT", True)
    RATE_LIMIT = (429, "RATE_LIMIT_EXCEEDED", True)
    # Raised on purpose, but still alerts like a fault.
    SERVICE_UNAVAILABLE = (503, "SERVICE_UNAVAILABLE", False)
    INTERNAL = (500, "INTERNAL_SERVER_ERROR", False)
    UNKNOWN = (500, "UNKNOWN_ERROR", False)

    def __init__(self, status_code: int, code: str, is_operational: bool) -> None:
        self.status_code = status_code
        self.code = code
        self.is_operational = is_operational


@dataclass(frozen=True)
class ErrorClassification:
    """Outward view of an error, as written to the client."""

    status_code: int
    code: str
    message: str
    is_operational: bool
    fields: Mapping[str, str] | None = None

    @classmethod
    def for_kind(
        cls,
        kind: ErrorKind,
        message: str,
        fields: Mapping[str, str] | None = None,
    ) -> "ErrorClassification":
        return cls(
            status_code=kind.status_code,
            code=kind.code,
            message=message,
            is_operational=kind.is_operational,
            fields=fields,
        )


INTERNAL_CLASSIFICATION = ErrorClassification.for_kind(
    ErrorKind.INTERNAL, INTERNAL_MESSAGE
)


class AppError(Exception):
    """Single exception type for every taxonomy variant.

    Status, code and operational flag come from ``kind`` and cannot be
    changed after construction. Prefer the per-kind constructors.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        fields: Mapping[str, str] | None = None,
    ) -> None:
        if fields is not None and kind is not ErrorKind.VALIDATION:
            raise ValueError("Field errors are only carried by validation errors")
        super().__init__(message)
        self._kind = kind
        self._message = message
        self._fields = MappingProxyType(dict(fields)) if fields is not None else None

    @property
    def kind(self) -> ErrorKind:
        return self._kind

    @property
    def message(self) -> str:
        return self._message

    @property
    def fields(self) -> Mapping[str, str] | None:
        return self._fields

    @property
    def status_code(self) -> int:
        return self._kind.status_code

    @property
    def code(self) -> str:
        return self._kind.code

    @property
    def is_operational(self) -> bool:
        return self._kind.is_operational

    def __repr__(self) -> str:
        return f"AppError({self._kind.name}, {self._message!r})"

    # --- Per-kind constructors ---

    @classmethod
    def validation(
        cls,
        message: str = "Validation failed",
        fields: Mapping[str, str] | None = None,
    ) -> "AppError":
        """Build a 400 validation error with optional field-path messages."""
        return cls(ErrorKind.VALIDATION, message, fields)

    @classmethod
    def not_found(cls, resource: str) -> "AppError":
        """Build a 404 error whose message is ``"<resource> not found"``."""
        return cls(ErrorKind.NOT_FOUND, f"{resource} not found")

    @classmethod
    def unauthorized(cls, message: str = "Unauthorized") -> "AppError":
        return cls(ErrorKind.UNAUTHORIZED, message)

    @classmethod
    def forbidden(cls, message: str = "Forbidden") -> "AppError":
        return cls(ErrorKind.FORBIDDEN, message)

    @classmethod
    def conflict(cls, message: str) -> "AppError":
        return cls(ErrorKind.CONFLICT, message)

    @classmethod
    def rate_limit(cls, message: str = "Too many requests") -> "AppError":
        return cls(ErrorKind.RATE_LIMIT, message)

    @classmethod
    def service_unavailable(
        cls, message: str = "Service temporarily unavailable"
    ) -> "AppError":
        return cls(ErrorKind.SERVICE_UNAVAILABLE, message)

    @classmethod
    def internal(cls, message: str = INTERNAL_MESSAGE) -> "AppError":
        return cls(ErrorKind.INTERNAL, message)


def classify_error(error: Any) -> ErrorClassification:
    """Map any raised value onto the taxonomy.

    Args:
        error: A taxonomy error, any other exception, or an arbitrary value
            that reached the error handler.

    Returns:
        The taxonomy error's own classification; ``UNKNOWN_ERROR`` with the
        exception text for other exceptions that carry a message; the fixed
        internal default for everything else.
    """
    if isinstance(error, AppError):
        return ErrorClassification.for_kind(error.kind, error.message, error.fields)
    if isinstance(error, BaseException):
        message = str(error)
        if message:
            return ErrorClassification.for_kind(ErrorKind.UNKNOWN, message)
    return INTERNAL_CLASSIFICATION
