"""
core/errors.py -- Error taxonomy for the authentication core.

Every failure the core can report is an AuthCoreError subclass. Each carries
a stable machine-readable code, a human message and the HTTP status the
transport layer should use. Only UnauthenticatedError is an authentication
failure (401); every other kind is a request-validation failure (400).

The core raises these at the point of violation and never catches them
itself. api/main.py renders them through a single exception handler.

Layer rule: no imports from api/ or auth/.
"""

from __future__ import annotations


class AuthCoreError(Exception):
    """Base class for all domain errors raised by auth/."""

    code: str = "auth_error"
    status_code: int = 400
    default_message: str = "Request could not be processed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateEmailError(AuthCoreError):
    """An active account other than the target already owns the email."""

    code = "duplicate_email"
    default_message = "Email is already registered."


class NotFoundError(AuthCoreError):
    """No active account matches the lookup, or the identifier is invalid."""

    code = "not_found"
    default_message = "Account not found."


class InvalidCredentialsError(AuthCoreError):
    """Unknown email or wrong password; both get the same message."""

    code = "invalid_credentials"
    default_message = "Invalid email or password."


class InvalidPasswordError(AuthCoreError):
    """Password is longer than bcrypt can hash (72 UTF-8 bytes)."""

    code = "invalid_password"
    default_message = "Password must be at most 72 bytes."


class UnauthenticatedError(AuthCoreError):
    """Token is malformed, expired, or signed with the wrong secret."""

    code = "unauthenticated"
    status_code = 401
    default_message = "Invalid or expired token."


class InvalidRefreshError(AuthCoreError):
    """Refresh token verified but the account it names no longer exists."""

    code = "invalid_refresh"
    default_message = "Refresh token does not reference an active account."
