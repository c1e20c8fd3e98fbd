"""
Lifecycle error taxonomy.

Every guard raises a ``LifecycleError`` subclass carrying an HTTP-equivalent
status code, a localized message and a list of field errors. The boundary
layer renders them into the response envelope; nothing inside the
lifecycle core catches them.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional


@dataclass(frozen=True)
class FieldError:
    """A single ``(field, message)`` pair."""

    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}


class LifecycleError(Exception):
    """Base class for every error raised by the lifecycle core."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        errors: Optional[Iterable[FieldError]] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message
        self.errors: List[FieldError] = list(errors or [])
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.status_code,
            "success": False,
            "message": self.message,
            "errors": [e.to_dict() for e in self.errors],
        }


class BadRequest(LifecycleError):
    """Malformed or missing id, empty params on update, bad list params."""

    status_code = 400


class NoRecordUpdated(BadRequest):
    """Update request that would not change any persisted attribute."""


class NoRecordDeleted(BadRequest):
    """Delete request for a record that is already deleted."""


class Unauthorized(LifecycleError):
    status_code = 401


class Forbidden(LifecycleError):
    """Superadmin-only operation attempted by a regular actor."""

    status_code = 403


class NotFound(LifecycleError):
    status_code = 404


class LockVersionOutdated(LifecycleError):
    """Optimistic lock mismatch: the record changed since the caller read it."""

    status_code = 409


class ValidationFailed(LifecycleError):
    """Field-shape, status-transition, dependency or field-value violations."""

    status_code = 422


class ServerError(LifecycleError):
    status_code = 500


class ErrorCollector:
    """Accumulates field errors within a single guard before raising.

    Usage:
        errors = ErrorCollector()
        errors.add("name", "Name cannot be blank.")
        errors.raise_if_any(ValidationFailed, "Field validation failed.")
    """

    def __init__(self) -> None:
        self._errors: List[FieldError] = []

    def add(self, field: str, message: str) -> None:
        self._errors.append(FieldError(field, message))

    def extend(self, errors: Iterable[FieldError]) -> None:
        self._errors.extend(errors)

    @property
    def errors(self) -> List[FieldError]:
        return list(self._errors)

    def __bool__(self) -> bool:
        return bool(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    def raise_if_any(self, error_cls: Optional[type] = None, message: str = "") -> None:
        if self._errors:
            raise (error_cls or ValidationFailed)(message, self._errors)
