"""
Fehlerklassen des Kerns.

Die Routen lassen diese Ausnahmen durchlaufen; main.py übersetzt sie in
JSON-Antworten mit passendem Statuscode.
"""

from __future__ import annotations

from typing import Any, Optional


class CoreError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, *, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message, "code": self.code}
        payload.update(self.details)
        return payload


class NotFoundError(CoreError):
    status_code = 404
    code = "not_found"


class ForbiddenError(CoreError):
    """Konto ohne Abo / abgelaufene Testphase."""

    status_code = 403
    code = "subscription_required"


class ValidationError(CoreError):
    status_code = 400
    code = "validation_error"

    def __init__(self, message: str, fields: Optional[list[dict[str, str]]] = None) -> None:
        self.fields = fields or []
        super().__init__(message, details={"fields": self.fields})

    @classmethod
    def invalid(cls, field: str, message: str) -> "ValidationError":
        return cls(f"Invalid field {field}: {message}", [{"field": field, "message": message}])


class IllegalTransitionError(CoreError):
    status_code = 409
    code = "illegal_transition"


class ConflictError(CoreError):
    """Gleichzeitige Änderung hat das Rennen verloren – erneut versuchen."""

    status_code = 409
    code = "conflict"
