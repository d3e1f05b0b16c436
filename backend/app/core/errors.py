# app/core/errors.py
"""
Domain error taxonomy.

Services raise these; app.main translates them into the standard error body
({"error", "message", "errors"?, "details"?}). Nothing here knows about FastAPI.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class FieldError:
    field: str
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "reason": self.reason}


class AppError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, *, details: dict[str, Any] | None = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


# -----------------------------
# 400
# -----------------------------
class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Validation failed"

    def __init__(
        self,
        errors: list[FieldError] | None = None,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.errors = list(errors or [])
        super().__init__(message, details=details)

    @property
    def fields(self) -> list[str]:
        return [e.field for e in self.errors]


class WeakCredential(ValidationError):
    default_message = "Password does not meet requirements."

    def __init__(self, violations: list[str]) -> None:
        self.violations = list(violations)
        super().__init__(
            [FieldError("password", v) for v in self.violations],
            details={"code": "WEAK_PASSWORD", "violations": self.violations},
        )


class InvalidRole(ValidationError):
    default_message = "Invalid role specified"

    def __init__(self, role: Any) -> None:
        self.role = role
        super().__init__([FieldError("role", "must be one of Admin, Dentist, Patient")])


# -----------------------------
# 401
# -----------------------------
class AuthenticationError(AppError):
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class InvalidCredential(AuthenticationError):
    # Same text as every other 401 so a failed login does not say which check failed.
    pass


class IdentityNotFound(AuthenticationError):
    pass


class TokenExpired(AuthenticationError):
    default_message = "Token expired"


class TokenMalformed(AuthenticationError):
    default_message = "Invalid token"


# -----------------------------
# 403 / 404 / 409
# -----------------------------
class Forbidden(AppError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Access denied"


class NotFound(AppError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Not found"


class DuplicateIdentity(AppError):
    status_code = 409
    code = "CONFLICT"
    default_message = "User already exists with this email"


# -----------------------------
# 500
# -----------------------------
class ConfigError(AppError):
    default_message = "Server misconfigured"


class RenderError(AppError):
    default_message = "Error generating PDF"
