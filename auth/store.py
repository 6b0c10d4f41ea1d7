"""
auth/store.py -- SQLAlchemy Core persistence layer for accounts.

Pattern: Repository + Data Mapper. AccountStore is the repository;
_row_to_account is the mapper. Services never touch SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

Soft deletion:
  Rows are never hard-deleted. deleted_at is stamped instead, and every
  lookup applies the active-only predicate through _active_only() unless the
  caller explicitly asks for deleted rows. Keep the filter in that one place.

Email uniqueness:
  AccountService checks uniqueness before writing (check-then-act). The
  partial unique index ix_accounts_email_active (email WHERE deleted_at IS
  NULL) is the storage-level backstop for concurrent writers: the losing
  insert/update raises IntegrityError, which the service translates into
  DuplicateEmailError. The index is partial so a soft-deleted account does
  not block re-registration of its email.

DB path: auth/authcore.db unless DATABASE_URL is set.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import JSON, Column, Index, Integer, MetaData, String, Table, Text, create_engine, event, select
from sqlalchemy.engine import Engine

from auth.models import Account

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).parent / 'authcore.db'}"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_accounts = Table(
    "accounts",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255)),
    Column("email", String(255), nullable=False),
    Column("hashed_password", Text, nullable=False),
    Column("roles", JSON, nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("deleted_at", String(32)),  # NULL = active
)

Index(
    "ix_accounts_email_active",
    _accounts.c.email,
    unique=True,
    sqlite_where=_accounts.c.deleted_at.is_(None),
    postgresql_where=_accounts.c.deleted_at.is_(None),
)

# Columns update_fields() may touch. id, created_at and deleted_at are owned
# by the store.
_UPDATABLE_COLUMNS = frozenset({"name", "email", "hashed_password", "roles"})


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _active_only(stmt, include_deleted: bool):
    """Apply the default soft-delete filter to a select/update statement."""
    if include_deleted:
        return stmt
    return stmt.where(_accounts.c.deleted_at.is_(None))


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AccountStore:
    """Repository for Account records.

    Usage:
        store = AccountStore()
        account = store.insert(Account(email="a@x.com", hashed_password=hash_password("pw")))
        store.find_by_email("a@x.com")
        store.close()
    """

    def __init__(self, db_url: str = _DEFAULT_DB_URL) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_by_email(self, email: str, include_deleted: bool = False) -> Account | None:
        """Look up an account by exact email. Returns None if not found.

        With include_deleted=True a soft-deleted row may be returned; when
        several rows share the email the active one wins, then the newest.
        """
        stmt = _active_only(select(_accounts).where(_accounts.c.email == email), include_deleted)
        stmt = stmt.order_by(_accounts.c.deleted_at.is_not(None), _accounts.c.id.desc())
        with self.engine.connect() as conn:
            row = conn.execute(stmt).first()
        return _row_to_account(row) if row is not None else None

    def find_by_id(self, account_id: int, include_deleted: bool = False) -> Account | None:
        """Look up an account by primary key. Returns None if not found."""
        stmt = _active_only(select(_accounts).where(_accounts.c.id == account_id), include_deleted)
        with self.engine.connect() as conn:
            row = conn.execute(stmt).first()
        return _row_to_account(row) if row is not None else None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, account: Account) -> Account:
        """Insert a new account and return the stored record.

        Raises sqlalchemy.exc.IntegrityError if an active account already
        holds the email (partial unique index).
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _accounts.insert().values(
                    name=account.name,
                    email=account.email,
                    hashed_password=account.hashed_password,
                    roles=list(account.roles),
                    created_at=_now_iso(),
                    deleted_at=None,
                )
            )
            conn.commit()
            account_id = result.inserted_primary_key[0]
        stored = self.find_by_id(account_id)
        if stored is None:  # pragma: no cover - would mean the row vanished mid-call
            raise RuntimeError(f"Account {account_id} not found after insert")
        return stored

    def update_fields(self, account_id: int, **fields) -> None:
        """Update the given columns on an active account.

        Only columns in _UPDATABLE_COLUMNS are accepted. Unknown keys raise
        ValueError rather than being silently ignored. Raises IntegrityError
        if a new email collides with another active account.
        """
        unknown = set(fields) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unknown account fields: {sorted(unknown)!r}")
        if not fields:
            return
        if "roles" in fields:
            fields["roles"] = list(fields["roles"])
        stmt = _active_only(_accounts.update().where(_accounts.c.id == account_id), False)
        with self.engine.connect() as conn:
            conn.execute(stmt.values(**fields))
            conn.commit()

    def soft_delete(self, account_id: int) -> int:
        """Stamp deleted_at on an active account. Returns the affected row count."""
        stmt = _active_only(_accounts.update().where(_accounts.c.id == account_id), False)
        with self.engine.connect() as conn:
            result = conn.execute(stmt.values(deleted_at=_now_iso()))
            conn.commit()
        return result.rowcount

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_account(row) -> Account:
    return Account(
        id=row.id,
        name=row.name,
        email=row.email,
        hashed_password=row.hashed_password,
        roles=list(row.roles or []),
        created_at=row.created_at,
        deleted_at=row.deleted_at,
    )
