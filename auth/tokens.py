"""
auth/tokens.py -- Access and refresh token issuance and verification.

Security design decisions:
  JWT: python-jose with HS256. Two independent secrets: the access secret
       signs access tokens, the refresh secret signs refresh tokens. A token of
       one kind therefore never verifies as the other, even though both are
       bearer strings of the same shape. A "type" claim is checked as well.

  Payloads: access = {email, roles}, refresh = {email}. Both carry iat, exp
       and a random jti, so two tokens minted in the same second for the same
       account are still different strings.

  Failures: malformed, expired and wrong-secret tokens all raise the same
       UnauthenticatedError with the same message. Callers cannot tell them
       apart.

  Configuration is passed in at construction. TokenService never reads
  process settings on its own; from_settings() is the only bridge.

Layer rule: no imports from api/. No I/O.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

from jose import JWTError, jwt

from auth.models import TokenPair
from core.errors import UnauthenticatedError

if TYPE_CHECKING:
    from core.config import Settings

logger = logging.getLogger("authcore.tokens")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class TokenService:
    """Token Issuer/Verifier over a fixed signing configuration.

    Usage:
        tokens = TokenService(access_secret, refresh_secret, 900, 604800)
        pair = tokens.generate_tokens(account)
        payload = tokens.verify_access_token(pair.access_token)
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_expire_seconds: int,
        refresh_expire_seconds: int,
        algorithm: str = "HS256",
    ) -> None:
        if not access_secret or not refresh_secret:
            raise ValueError("TokenService requires non-empty access and refresh secrets")
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh secrets must differ")
        if access_expire_seconds <= 0 or refresh_expire_seconds <= 0:
            raise ValueError("Token expiry durations must be positive")
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self._access_ttl = access_expire_seconds
        self._refresh_ttl = refresh_expire_seconds
        self._algorithm = algorithm

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenService:
        return cls(
            access_secret=settings.jwt_secret,
            refresh_secret=settings.jwt_refresh_secret,
            access_expire_seconds=settings.access_token_expire_seconds,
            refresh_expire_seconds=settings.refresh_token_expire_seconds,
        )

    @property
    def access_expire_seconds(self) -> int:
        return self._access_ttl

    # ------------------------------------------------------------------
    # Issuance
    # ------------------------------------------------------------------

    def generate_tokens(self, account: Any) -> TokenPair:
        """Sign an access and a refresh token for the account.

        account may be an Account or an AccountResponse -- only email and
        roles are read. The account object itself is returned as pair.data.
        """
        access_token = self._sign(
            {"email": account.email, "roles": list(account.roles), "type": ACCESS_TOKEN_TYPE},
            self._access_secret,
            self._access_ttl,
        )
        refresh_token = self._sign(
            {"email": account.email, "type": REFRESH_TOKEN_TYPE},
            self._refresh_secret,
            self._refresh_ttl,
        )
        return TokenPair(access_token=access_token, refresh_token=refresh_token, data=account)

    def _sign(self, claims: dict[str, Any], secret: str, ttl: int) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "iat": now,
            "exp": now + timedelta(seconds=ttl),
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, secret, algorithm=self._algorithm)

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    def verify_access_token(self, token: str) -> dict[str, Any]:
        """Return the decoded access payload or raise UnauthenticatedError."""
        return self._verify(token, self._access_secret, ACCESS_TOKEN_TYPE)

    def verify_refresh_token(self, token: str) -> dict[str, Any]:
        """Return the decoded refresh payload or raise UnauthenticatedError."""
        return self._verify(token, self._refresh_secret, REFRESH_TOKEN_TYPE)

    def _verify(self, token: str, secret: str, expected_type: str) -> dict[str, Any]:
        try:
            payload = jwt.decode(token, secret, algorithms=[self._algorithm])
        except JWTError as exc:
            logger.debug("%s token rejected: %s", expected_type, exc)
            raise UnauthenticatedError() from None
        if payload.get("type") != expected_type or not payload.get("email"):
            logger.debug("%s token rejected: unexpected claims", expected_type)
            raise UnauthenticatedError()
        return payload
