"""Unit tests for identity token verification."""

from datetime import timedelta

import pytest

from jose import jwt

from roamlist.kernel.identity.tokens import IdentityTokenManager


@pytest.fixture
def manager() -> IdentityTokenManager:
    return IdentityTokenManager(
        secret_key="test-secret-key-for-testing-only-32chars",
        algorithm="HS256",
        expire_minutes=30,
        issuer="",
    )


class TestIdentityTokens:

    def test_round_trip_claims(self, manager):
        token = manager.create_token("idp|123", "ana@example.com", name="Ana", picture="https://img/a.png")

        claims = manager.verify_token(token)

        assert claims is not None
        assert claims.sub == "idp|123"
        assert claims.email == "ana@example.com"
        assert claims.name == "Ana"
        assert claims.picture == "https://img/a.png"
        assert claims.exp > claims.iat

    def test_expired_token_rejected(self, manager):
        token = manager.create_token("idp|123", "ana@example.com", expires_delta=timedelta(seconds=-5))

        assert manager.verify_token(token) is None

    def test_wrong_secret_rejected(self, manager):
        other = IdentityTokenManager(secret_key="another-secret-key-of-reasonable-length", issuer="")
        token = other.create_token("idp|123", "ana@example.com")

        assert manager.verify_token(token) is None

    def test_wrong_type_rejected(self, manager):
        token = jwt.encode(
            {"sub": "idp|123", "email": "ana@example.com", "type": "refresh", "exp": 4102444800, "iat": 0},
            manager.secret_key,
            algorithm="HS256",
        )

        assert manager.verify_token(token) is None

    def test_garbage_rejected(self, manager):
        assert manager.verify_token("not-a-token") is None

    def test_issuer_enforced_when_configured(self):
        strict = IdentityTokenManager(secret_key="shared-secret-key-for-issuer-tests", issuer="https://idp.example")
        loose = IdentityTokenManager(secret_key="shared-secret-key-for-issuer-tests", issuer="")

        assert strict.verify_token(strict.create_token("idp|1", "a@example.com")) is not None
        assert strict.verify_token(loose.create_token("idp|1", "a@example.com")) is None


def _signed(manager: IdentityTokenManager, claims: dict) -> str:
    return jwt.encode(claims, manager.secret_key, algorithm=manager.algorithm)


FULL_CLAIMS = {
    "sub": "idp|123",
    "email": "ana@example.com",
    "type": "identity",
    "exp": 4102444800,  # 2100-01-01
    "iat": 1700000000,
}


class TestMalformedClaims:
    """Signed tokens whose claims are incomplete or mistyped are rejected, never raised."""

    def test_complete_claims_accepted(self, manager):
        claims = manager.verify_token(_signed(manager, FULL_CLAIMS))

        assert claims is not None
        assert claims.exp.year == 2100
        assert claims.jti == ""

    @pytest.mark.parametrize("missing", ["exp", "iat", "sub", "email", "type"])
    def test_missing_claim_rejected(self, manager, missing):
        claims = {k: v for k, v in FULL_CLAIMS.items() if k != missing}

        assert manager.verify_token(_signed(manager, claims)) is None

    @pytest.mark.parametrize(
        "field, value",
        [
            ("email", 12345),
            ("email", ["ana@example.com"]),
            ("name", {"first": "Ana"}),
            ("jti", 7),
            ("sub", 42),
            ("exp", "tomorrow"),
            ("iat", "yesterday"),
        ],
    )
    def test_mistyped_claim_rejected(self, manager, field, value):
        claims = {**FULL_CLAIMS, field: value}

        assert manager.verify_token(_signed(manager, claims)) is None
