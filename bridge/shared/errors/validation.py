"""
Validation adapter.

Turns an externally produced list of field validation failures into a
single ``AppError`` of kind VALIDATION. Deciding what is valid is left to
the validators that populate the feed.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from fastapi import Request

from bridge.shared.errors.taxonomy import AppError

UNKNOWN_FIELD = "unknown"
DEFAULT_FIELD_MESSAGE = "Validation failed"


@dataclass(frozen=True)
class ValidationFailure:
    """A single field failure: path segments into the payload plus a message."""

    path: Sequence[str | int] | None
    message: str | None = None


def _unpack(failure: ValidationFailure | Mapping[str, Any]) -> tuple[Any, Any]:
    if isinstance(failure, Mapping):
        return failure.get("path"), failure.get("message")
    return failure.path, failure.message


def collect_field_errors(
    failures: Iterable[ValidationFailure | Mapping[str, Any]],
) -> dict[str, str]:
    """Build the field-path to message mapping.

    Path segments are joined with ``"."``. A missing or empty path becomes
    ``"unknown"`` and a missing message becomes ``"Validation failed"``.
    Later failures for the same path replace earlier ones.
    """
    fields: dict[str, str] = {}
    for failure in failures:
        path, message = _unpack(failure)
        key = ".".join(str(segment) for segment in path) if path else ""
        fields[key or UNKNOWN_FIELD] = message or DEFAULT_FIELD_MESSAGE
    return fields


def raise_for_validation_failures(
    failures: Iterable[ValidationFailure | Mapping[str, Any]],
) -> None:
    """Raise a validation error when any failure is present.

    Raises:
        AppError: Kind VALIDATION, with ``fields`` built by
            ``collect_field_errors``.
    """
    fields = collect_field_errors(failures)
    if fields:
        raise AppError.validation(DEFAULT_FIELD_MESSAGE, fields)


def check_validation_failures(request: Request) -> None:
    """FastAPI dependency reading ``request.state.validation_failures``."""
    raise_for_validation_failures(
        getattr(request.state, "validation_failures", None) or []
    )
