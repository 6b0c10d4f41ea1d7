"""Unit tests for auth/tokens.py -- TokenService issuance and verification.

Covers:
- generate_tokens() signs two different tokens and returns the subject as data
- access payload carries email + roles, refresh payload carries email only
- each verifier rejects tokens signed with the other secret
- expired, malformed and tampered tokens all raise the same UnauthenticatedError
- constructor rejects empty/identical secrets and non-positive durations
"""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from auth.models import Account
from auth.tokens import TokenService
from core.errors import UnauthenticatedError

ACCESS_SECRET = "unit-access-secret-0123456789abcdef"
REFRESH_SECRET = "unit-refresh-secret-0123456789abcdef"


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(ACCESS_SECRET, REFRESH_SECRET, access_expire_seconds=900, refresh_expire_seconds=604800)


@pytest.fixture
def account() -> Account:
    return Account(id=1, email="test@test.com", hashed_password="x", name="test", roles=["user"])


class TestGenerateTokens:
    def test_returns_both_tokens_and_subject(self, token_service: TokenService, account: Account) -> None:
        pair = token_service.generate_tokens(account)
        assert pair.access_token
        assert pair.refresh_token
        assert pair.access_token != pair.refresh_token
        assert pair.data is account

    def test_access_payload(self, token_service: TokenService, account: Account) -> None:
        pair = token_service.generate_tokens(account)
        payload = token_service.verify_access_token(pair.access_token)
        assert payload["email"] == "test@test.com"
        assert payload["roles"] == ["user"]
        assert payload["exp"] > payload["iat"]

    def test_refresh_payload_has_no_roles(self, token_service: TokenService, account: Account) -> None:
        pair = token_service.generate_tokens(account)
        payload = token_service.verify_refresh_token(pair.refresh_token)
        assert payload["email"] == "test@test.com"
        assert "roles" not in payload

    def test_consecutive_pairs_differ(self, token_service: TokenService, account: Account) -> None:
        """Two pairs minted back to back (same second) must still be distinct strings."""
        first = token_service.generate_tokens(account)
        second = token_service.generate_tokens(account)
        assert first.access_token != second.access_token
        assert first.refresh_token != second.refresh_token

    def test_refresh_outlives_access(self, token_service: TokenService, account: Account) -> None:
        pair = token_service.generate_tokens(account)
        access = token_service.verify_access_token(pair.access_token)
        refresh = token_service.verify_refresh_token(pair.refresh_token)
        assert refresh["exp"] > access["exp"]


class TestVerify:
    def test_access_verifier_rejects_refresh_token(self, token_service: TokenService, account: Account) -> None:
        pair = token_service.generate_tokens(account)
        with pytest.raises(UnauthenticatedError):
            token_service.verify_access_token(pair.refresh_token)

    def test_refresh_verifier_rejects_access_token(self, token_service: TokenService, account: Account) -> None:
        pair = token_service.generate_tokens(account)
        with pytest.raises(UnauthenticatedError):
            token_service.verify_refresh_token(pair.access_token)

    def test_access_claims_signed_with_refresh_secret_rejected(self, token_service: TokenService) -> None:
        """Right claims, wrong secret domain."""
        exp = datetime.now(timezone.utc) + timedelta(minutes=5)
        forged = jwt.encode(
            {"email": "test@test.com", "roles": ["user"], "type": "access", "exp": exp},
            REFRESH_SECRET,
            algorithm="HS256",
        )
        with pytest.raises(UnauthenticatedError):
            token_service.verify_access_token(forged)

    def test_expired_token_rejected(self, token_service: TokenService) -> None:
        exp = datetime.now(timezone.utc) - timedelta(seconds=10)
        expired = jwt.encode(
            {"email": "test@test.com", "roles": ["user"], "type": "access", "exp": exp},
            ACCESS_SECRET,
            algorithm="HS256",
        )
        with pytest.raises(UnauthenticatedError):
            token_service.verify_access_token(expired)

    def test_missing_email_rejected(self, token_service: TokenService) -> None:
        exp = datetime.now(timezone.utc) + timedelta(minutes=5)
        token = jwt.encode({"type": "refresh", "exp": exp}, REFRESH_SECRET, algorithm="HS256")
        with pytest.raises(UnauthenticatedError):
            token_service.verify_refresh_token(token)

    @pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
    def test_malformed_token_rejected(self, token_service: TokenService, token: str) -> None:
        with pytest.raises(UnauthenticatedError):
            token_service.verify_access_token(token)

    def test_tampered_token_rejected(self, token_service: TokenService, account: Account) -> None:
        pair = token_service.generate_tokens(account)
        header, payload, signature = pair.access_token.split(".")
        first = "A" if signature[0] != "A" else "B"
        tampered = f"{header}.{payload}.{first}{signature[1:]}"
        with pytest.raises(UnauthenticatedError):
            token_service.verify_access_token(tampered)

    def test_failure_kinds_are_indistinguishable(self, token_service: TokenService, account: Account) -> None:
        """Expired, malformed and wrong-secret failures carry the same code and message."""
        pair = token_service.generate_tokens(account)
        exp = datetime.now(timezone.utc) - timedelta(seconds=10)
        expired = jwt.encode({"email": "x@x.com", "type": "access", "exp": exp}, ACCESS_SECRET, algorithm="HS256")
        errors = []
        for token in ("garbage", expired, pair.refresh_token):
            with pytest.raises(UnauthenticatedError) as excinfo:
                token_service.verify_access_token(token)
            errors.append((excinfo.value.code, excinfo.value.message))
        assert len(set(errors)) == 1


class TestConstruction:
    def test_empty_secret_rejected(self) -> None:
        with pytest.raises(ValueError):
            TokenService("", REFRESH_SECRET, 900, 604800)

    def test_identical_secrets_rejected(self) -> None:
        with pytest.raises(ValueError):
            TokenService(ACCESS_SECRET, ACCESS_SECRET, 900, 604800)

    def test_non_positive_duration_rejected(self) -> None:
        with pytest.raises(ValueError):
            TokenService(ACCESS_SECRET, REFRESH_SECRET, 0, 604800)
