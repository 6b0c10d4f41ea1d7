"""
auth/passwords.py -- One-way password hashing.

bcrypt is used directly rather than through passlib: passlib's wrap-bug
detection builds a password longer than 72 bytes, which bcrypt 4.x rejects.

bcrypt only reads the first 72 bytes of a password; bcrypt 5.x refuses longer
input outright. Passwords are therefore capped at MAX_PASSWORD_BYTES of UTF-8
here, independent of the installed bcrypt version.

DUMMY_HASH enables timing equalization in AccountService.validate_credentials()
so response time does not reveal whether an email is registered.

Layer rule: stdlib + bcrypt + core/ only.
"""

from __future__ import annotations

import bcrypt

from core.errors import InvalidPasswordError

MAX_PASSWORD_BYTES = 72


def password_too_long(plain: str) -> bool:
    return len(plain.encode("utf-8")) > MAX_PASSWORD_BYTES


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    Raises InvalidPasswordError if the password exceeds MAX_PASSWORD_BYTES.
    """
    if password_too_long(plain):
        raise InvalidPasswordError()
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed hash or an over-long password counts as a mismatch rather
    than an error. No stored hash can come from an over-long password.
    """
    if password_too_long(plain):
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


# Computed once at module load so the first failed login is not measurably
# slower than later ones.
DUMMY_HASH: str = hash_password("authcore_timing_dummy")
