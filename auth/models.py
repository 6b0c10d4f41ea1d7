"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, near-zero logic). Dataclasses own
domain shape; the store, services and routes do the work.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

ROLE_USER = "user"
ROLE_ADMIN = "admin"
DEFAULT_ROLES: tuple[str, ...] = (ROLE_USER,)


@dataclass
class Account:
    """The durable identity record.

    hashed_password is a bcrypt hash and must never leave the service layer;
    use AccountResponse for anything returned to a caller.

    deleted_at is the soft-deletion marker: None means active. Deleted rows
    are retained by the store but excluded from every default lookup.
    """

    email: str
    hashed_password: str
    id: int | None = None
    name: str | None = None
    roles: list[str] = field(default_factory=lambda: list(DEFAULT_ROLES))
    created_at: str | None = None
    deleted_at: str | None = None  # ISO 8601, None = active

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


@dataclass(frozen=True)
class AccountResponse:
    """Externally safe projection of an Account (no password, no deletion marker)."""

    id: int | None
    name: str | None
    email: str
    roles: list[str]

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TokenPair:
    """Result of a successful authentication event. Never persisted.

    data is the subject the tokens were minted for. AuthService always hands
    callers a pair whose data is an AccountResponse.
    """

    access_token: str
    refresh_token: str
    data: Any
