"""Domain-level errors for the kollabs repository.

Every failure raised by the lifecycle managers is one of the variants below.
Each carries a fixed HTTP status, a human readable ``message`` and, where the
caller can act on it, an ``error`` detail string and a structured ``data``
mapping (e.g. ``{"currentStatus": "draft", "requiredStatus": "approved"}``).
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import ValidationError


class KollabsError(Exception):
    """Base class for all domain failures."""

    status_code: int = 500
    kind: str = "internal"

    def __init__(
        self,
        message: str,
        *,
        error: Optional[str] = None,
        data: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error = error
        self.data = dict(data) if data is not None else None


class NotFoundError(KollabsError):
    """Raised when an idea, kollab or parent discussion cannot be located."""

    status_code = 404
    kind = "not_found"


class ForbiddenError(KollabsError):
    """Raised when the entity state does not allow the operation."""

    status_code = 403
    kind = "forbidden"


class ConflictError(KollabsError):
    """Raised when an operation would break a uniqueness or state invariant."""

    status_code = 409
    kind = "conflict"


class UnprocessableEntityError(KollabsError):
    """Raised for well-formed input that is semantically rejected."""

    status_code = 422
    kind = "unprocessable_entity"


class InvalidFieldsError(KollabsError):
    """Raised when field bounds, types or enums are violated."""

    status_code = 400
    kind = "validation"

    @classmethod
    def from_validation_error(cls, exc: ValidationError) -> "InvalidFieldsError":
        return cls(format_validation_errors(exc.errors()))


def format_validation_errors(errors: list[Mapping[str, Any]]) -> str:
    """Join pydantic error entries into ``"path: message, ..."``."""

    parts = []
    for entry in errors:
        path = ".".join(str(part) for part in entry.get("loc", ()))
        message = entry.get("msg", "Invalid value")
        parts.append(f"{path}: {message}" if path else message)
    return ", ".join(parts) or "Validation error"
