"""
API request and response models for authcore REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

Separation of concerns: auth/ models = domain truth; api/ models = API contract.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auth.models import AccountResponse, TokenPair
from auth.passwords import MAX_PASSWORD_BYTES, password_too_long

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Deliberately loose: one "@", no whitespace, a dot in the domain part.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


def _strip(value):
    return value.strip() if isinstance(value, str) else value


def _check_password_bytes(value: Optional[str]) -> Optional[str]:
    # bcrypt's limit is in bytes, max_length counts characters.
    if value is not None and password_too_long(value):
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes in UTF-8")
    return value


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register.

    email and name are stripped of surrounding whitespace; password is taken
    verbatim, so "pw " and "pw" are different credentials here as in the core.
    """

    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=1, max_length=MAX_PASSWORD_BYTES)
    name: Optional[str] = Field(default=None, max_length=255)

    @field_validator("email", "name", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip(value)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login. password is taken verbatim."""

    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=MAX_PASSWORD_BYTES)

    @field_validator("email", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip(value)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class RefreshRequest(BaseModel):
    """Request body for POST /api/v1/auth/refresh."""

    refresh_token: str = Field(min_length=1)


class AccountUpdate(BaseModel):
    """Request body for PATCH /api/v1/accounts/{id}. Omitted fields are left untouched.

    roles are not accepted here; see RolesUpdate. password is taken verbatim.
    """

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN, max_length=255)
    password: Optional[str] = Field(default=None, min_length=1, max_length=MAX_PASSWORD_BYTES)

    @field_validator("email", "name", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip(value)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: Optional[str]) -> Optional[str]:
        return _check_password_bytes(value)


class RolesUpdate(BaseModel):
    """Request body for PUT /api/v1/accounts/{id}/roles (admin only)."""

    roles: list[str] = Field(min_length=1, max_length=20)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class AccountResponseModel(BaseModel):
    """Public view of an account. There is no password field on purpose."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: Optional[str]
    email: str
    roles: list[str]

    @classmethod
    def from_domain(cls, account: AccountResponse) -> "AccountResponseModel":
        return cls(**account.as_dict())


class TokenPairResponse(BaseModel):
    """Response body for register, login and refresh."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    data: AccountResponseModel

    @classmethod
    def from_domain(cls, pair: TokenPair, expires_in: int) -> "TokenPairResponse":
        return cls(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            expires_in=expires_in,
            data=AccountResponseModel.from_domain(pair.data),
        )


class MessageResponse(BaseModel):
    message: str


class ErrorDetail(BaseModel):
    """Structured error body shared by every failure response."""

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Envelope for every non-2xx response: {"error": {...}}."""

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
