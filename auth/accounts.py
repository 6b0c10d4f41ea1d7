"""
auth/accounts.py -- Account Service: every account invariant lives here.

AccountService is the only component allowed to call AccountStore.

Invariants enforced:
  - No two active accounts share an email. Checked before every write that
    sets an email (check-then-act); a storage-level IntegrityError from a
    concurrent writer is translated into the same DuplicateEmailError.
  - Lookups only ever see active accounts. Soft-deleted accounts are
    indistinguishable from accounts that never existed.
  - Passwords are hashed before they reach the store and the hash never
    leaves this module except inside an Account. Callers outside auth/ get
    AccountResponse.
  - No store write happens on any failure path.

Credential checks always run bcrypt, against DUMMY_HASH when the email is
unknown, so "no such email" and "wrong password" cost the same and raise the
same InvalidCredentialsError.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from auth.models import DEFAULT_ROLES, Account, AccountResponse
from auth.passwords import DUMMY_HASH, hash_password, verify_password
from auth.store import AccountStore
from core.errors import DuplicateEmailError, InvalidCredentialsError, NotFoundError

logger = logging.getLogger("authcore.accounts")

DELETED_MESSAGE = "Account successfully deleted"

MAX_ACCOUNT_ID = 2**63 - 1


class AccountService:
    """Account lifecycle rules over an AccountStore."""

    def __init__(self, store: AccountStore) -> None:
        self._store = store

    # ------------------------------------------------------------------
    # Create / authenticate
    # ------------------------------------------------------------------

    def create(self, email: str, password: str, name: str | None = None) -> Account:
        """Create an account with the default role set and return the stored record.

        Raises DuplicateEmailError if an active account already uses email,
        InvalidPasswordError if the password is longer than 72 UTF-8 bytes.
        """
        if self._store.find_by_email(email) is not None:
            raise DuplicateEmailError()

        account = Account(
            email=email,
            hashed_password=hash_password(password),
            name=name,
            roles=list(DEFAULT_ROLES),
        )
        try:
            created = self._store.insert(account)
        except IntegrityError as exc:
            # Lost a race with a concurrent registration for the same email.
            raise DuplicateEmailError() from exc
        logger.info("Account %s created", created.id)
        return created

    def validate_credentials(self, email: str, password: str) -> Account:
        """Return the active account for email if password matches.

        Raises InvalidCredentialsError for unknown email and wrong password alike.
        """
        account = self._store.find_by_email(email)
        if account is None:
            # Equalize timing -- do NOT return early before running bcrypt.
            verify_password(password, DUMMY_HASH)
            raise InvalidCredentialsError()
        if not verify_password(password, account.hashed_password):
            raise InvalidCredentialsError()
        return account

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find_by_id(self, account_id: int) -> Account:
        """Return the active account with this id or raise NotFoundError.

        Ids are assigned from 1 upward and stored as signed 64-bit integers,
        so anything outside 1..MAX_ACCOUNT_ID can never match and is rejected
        without a store call.
        """
        if account_id <= 0 or account_id > MAX_ACCOUNT_ID:
            raise NotFoundError()
        account = self._store.find_by_id(account_id)
        if account is None:
            raise NotFoundError()
        return account

    def find_by_email(self, email: str) -> Account:
        """Return the active account with this email or raise NotFoundError."""
        account = self._store.find_by_email(email)
        if account is None:
            raise NotFoundError()
        return account

    def profile(self, account_id: int) -> AccountResponse:
        return self.to_response(self.find_by_id(account_id))

    # ------------------------------------------------------------------
    # Update / remove
    # ------------------------------------------------------------------

    def update(self, account_id: int, **fields: Any) -> AccountResponse:
        """Apply a partial update and return the fresh projection.

        Accepted fields: name, email, password, roles. None values are treated
        as "not supplied". Order matters: the account is resolved by id first,
        then a new email is checked against other active accounts. The owner
        of the email only collides if it is a different account.

        Raises NotFoundError, DuplicateEmailError, InvalidPasswordError, or
        ValueError (empty roles, unknown field). Nothing is written when any of these is raised.
        """
        current = self.find_by_id(account_id)

        changes = {key: value for key, value in fields.items() if value is not None}

        email = changes.get("email")
        if email is not None:
            holder = self._store.find_by_email(email)
            if holder is not None and holder.id != current.id:
                raise DuplicateEmailError()

        if "roles" in changes and not changes["roles"]:
            raise ValueError("roles must not be empty")

        if "password" in changes:
            changes["hashed_password"] = hash_password(changes.pop("password"))

        try:
            self._store.update_fields(current.id, **changes)
        except IntegrityError as exc:
            raise DuplicateEmailError() from exc

        logger.info("Account %s updated (%s)", current.id, ", ".join(sorted(changes)) or "no changes")
        return self.profile(current.id)

    def remove(self, account_id: int) -> dict[str, str]:
        """Soft-delete the account. Raises NotFoundError if it is not active."""
        account = self.find_by_id(account_id)
        if self._store.soft_delete(account.id) == 0:
            # Deleted concurrently between the lookup and the write.
            raise NotFoundError()
        logger.info("Account %s soft-deleted", account.id)
        return {"message": DELETED_MESSAGE}

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------

    @staticmethod
    def to_response(account: Account) -> AccountResponse:
        """Project an Account to its public shape. Pure and total."""
        return AccountResponse(
            id=account.id,
            name=account.name,
            email=account.email,
            roles=list(account.roles),
        )
