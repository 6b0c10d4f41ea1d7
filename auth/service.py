"""
auth/service.py -- Auth Orchestrator, the core's single external entry point.

AuthService composes AccountService (account invariants, persistence) and
TokenService (signing and verification). It is the only component that
touches both. The transport layer talks to nothing else.

Refresh flow:
  TokenReceived -> SignatureVerified -> AccountResolved -> TokensIssued

  A failed verification raises UnauthenticatedError. A verified token whose
  account no longer resolves raises InvalidRefreshError -- a bad request, not
  an authentication failure. New tokens are minted from the account as it is
  now, so role or email changes since the refresh token was issued show up
  in the new access token. No retries at any step.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from auth.accounts import AccountService
from auth.models import Account, AccountResponse, TokenPair
from auth.tokens import TokenService
from core.errors import InvalidRefreshError, NotFoundError, UnauthenticatedError

logger = logging.getLogger("authcore.auth")


class AuthService:
    def __init__(self, accounts: AccountService, tokens: TokenService) -> None:
        self._accounts = accounts
        self._tokens = tokens

    @property
    def accounts(self) -> AccountService:
        return self._accounts

    @property
    def tokens(self) -> TokenService:
        return self._tokens

    # ------------------------------------------------------------------
    # Authentication events
    # ------------------------------------------------------------------

    def register(self, email: str, password: str, name: str | None = None) -> TokenPair:
        """Create an account and issue its first token pair.

        DuplicateEmailError propagates unchanged.
        """
        account = self._accounts.create(email, password, name)
        logger.info("Account %s registered", account.id)
        return self._issue(account)

    def login(self, email: str, password: str) -> TokenPair:
        """Validate credentials and issue a token pair.

        InvalidCredentialsError propagates unchanged.
        """
        account = self._accounts.validate_credentials(email, password)
        logger.info("Account %s logged in", account.id)
        return self._issue(account)

    def refresh_token(self, refresh_token: str) -> TokenPair:
        """Exchange a refresh token for a new pair built from current account state."""
        payload = self._tokens.verify_refresh_token(refresh_token)
        try:
            account = self._accounts.find_by_email(payload["email"])
        except NotFoundError:
            raise InvalidRefreshError() from None
        logger.info("Account %s refreshed tokens", account.id)
        return self._issue(account)

    def _issue(self, account: Account) -> TokenPair:
        pair = self._tokens.generate_tokens(account)
        return replace(pair, data=self._accounts.to_response(account))

    # ------------------------------------------------------------------
    # Account operations
    # ------------------------------------------------------------------

    def get_profile(self, account_id: int) -> AccountResponse:
        return self._accounts.profile(account_id)

    def update_account(self, account_id: int, **fields: Any) -> AccountResponse:
        return self._accounts.update(account_id, **fields)

    def delete_account(self, account_id: int) -> dict[str, str]:
        return self._accounts.remove(account_id)

    # ------------------------------------------------------------------
    # Per-request guard
    # ------------------------------------------------------------------

    def verify_access_token(self, token: str) -> dict[str, Any]:
        """Return the access payload or raise UnauthenticatedError."""
        return self._tokens.verify_access_token(token)

    def current_account(self, token: str) -> AccountResponse:
        """Resolve the active account an access token was issued to.

        A valid token for an account deleted since issuance is treated as
        unauthenticated.
        """
        payload = self.verify_access_token(token)
        try:
            account = self._accounts.find_by_email(payload["email"])
        except NotFoundError:
            raise UnauthenticatedError() from None
        return self._accounts.to_response(account)
