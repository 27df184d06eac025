"""
Error kinds returned by the auth service.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from auth.password_policy import Requirement


class AuthErrorKind(str, Enum):
    MISSING_FIELD = "missing_field"
    WEAK_PASSWORD = "weak_password"
    DUPLICATE_EMAIL = "duplicate_email"
    INVALID_CREDENTIALS = "invalid_credentials"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class AuthError:
    kind: AuthErrorKind
    message: str
    missing: Tuple[Requirement, ...] = ()

    @classmethod
    def missing_field(cls) -> "AuthError":
        return cls(AuthErrorKind.MISSING_FIELD, "email and password required")

    @classmethod
    def weak_password(cls, missing: Tuple[Requirement, ...]) -> "AuthError":
        return cls(
            AuthErrorKind.WEAK_PASSWORD,
            "password must contain an uppercase letter, a lowercase letter, "
            "a number and a special character",
            missing,
        )

    @classmethod
    def duplicate_email(cls) -> "AuthError":
        return cls(AuthErrorKind.DUPLICATE_EMAIL, "email already exists")

    @classmethod
    def invalid_credentials(cls) -> "AuthError":
        return cls(AuthErrorKind.INVALID_CREDENTIALS, "invalid email or password")

    @classmethod
    def internal(cls) -> "AuthError":
        return cls(AuthErrorKind.INTERNAL_ERROR, "internal error")
