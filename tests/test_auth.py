"""Unit tests for password hashing and session tokens."""

import base64
import json
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from messagely.auth import PasswordHasher, SessionIssuer
from messagely.config import Settings
from messagely.exceptions import InvalidTokenError
from messagely.schemas.user import SessionClaims

LOGIN_AT = datetime(2024, 5, 1, 12, 30, 15, 123456, tzinfo=timezone.utc)


def _b64(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


class TestPasswordHasher:
    """Test bcrypt hashing and verification."""

    def test_digest_is_not_plaintext(self, hasher):
        digest = hasher.hash("s3cret")
        assert digest != "s3cret"
        assert "s3cret" not in digest

    def test_work_factor_is_embedded(self, hasher):
        assert hasher.hash("s3cret").startswith("$2b$04$")

    def test_salted(self, hasher):
        assert hasher.hash("s3cret") != hasher.hash("s3cret")

    def test_verify_correct_password(self, hasher):
        digest = hasher.hash("s3cret")
        assert hasher.verify("s3cret", digest) is True

    def test_verify_wrong_password(self, hasher):
        digest = hasher.hash("s3cret")
        assert hasher.verify("not-it", digest) is False

    def test_verify_malformed_digest_is_false(self, hasher):
        assert hasher.verify("s3cret", "not-a-bcrypt-digest") is False

    def test_password_at_byte_limit(self, hasher):
        password = "x" * 72
        digest = hasher.hash(password)
        assert hasher.verify(password, digest) is True

    def test_hash_rejects_password_over_byte_limit(self, hasher):
        with pytest.raises(ValueError):
            hasher.hash("x" * 73)

    def test_verify_does_not_ignore_bytes_past_limit(self, hasher):
        digest = hasher.hash("x" * 72)
        assert hasher.verify("x" * 72 + "B", digest) is False
        assert hasher.verify("x" * 72 + "A", digest) is False

    def test_burn_returns_nothing(self, hasher):
        assert hasher.burn("anything") is None


class TestSessionIssuer:
    """Test token issuance and verification."""

    def test_round_trip(self, issuer):
        claims = SessionClaims(username="alice", login_timestamp=LOGIN_AT)
        token = issuer.issue(claims)

        recovered = issuer.verify(token)
        assert recovered.username == "alice"
        assert recovered.login_timestamp == LOGIN_AT

    def test_token_carries_only_session_claims(self, issuer):
        token = issuer.issue(SessionClaims(username="alice", login_timestamp=LOGIN_AT))
        payload = jwt.get_unverified_claims(token)
        assert set(payload) == {"username", "login_timestamp", "iat", "exp"}

    def test_deterministic_without_expiry(self, settings):
        settings.ACCESS_TOKEN_EXPIRE_MINUTES = 0
        issuer = SessionIssuer(settings)
        claims = SessionClaims(username="alice", login_timestamp=LOGIN_AT)

        token = issuer.issue(claims)
        assert token == issuer.issue(claims)
        assert set(jwt.get_unverified_claims(token)) == {"username", "login_timestamp"}
        assert issuer.verify(token) == claims

    def test_tampered_payload_rejected(self, issuer):
        token = issuer.issue(SessionClaims(username="alice", login_timestamp=LOGIN_AT))
        header, _, signature = token.split(".")
        forged = _b64({"username": "mallory", "login_timestamp": LOGIN_AT.isoformat()})

        with pytest.raises(InvalidTokenError):
            issuer.verify(f"{header}.{forged}.{signature}")

    def test_other_key_rejected(self, issuer):
        token = issuer.issue(SessionClaims(username="alice", login_timestamp=LOGIN_AT))
        other = SessionIssuer(Settings(SECRET_KEY="another-key"))

        with pytest.raises(InvalidTokenError):
            other.verify(token)

    def test_expired_token_rejected(self, issuer):
        token = jwt.encode(
            {
                "username": "alice",
                "login_timestamp": LOGIN_AT.isoformat(),
                "exp": datetime.now(timezone.utc) - timedelta(minutes=1),
            },
            "test-secret-key",
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError):
            issuer.verify(token)

    def test_missing_claim_rejected(self, issuer):
        token = jwt.encode({"username": "alice"}, "test-secret-key", algorithm="HS256")
        with pytest.raises(InvalidTokenError):
            issuer.verify(token)

    def test_garbage_rejected(self, issuer):
        with pytest.raises(InvalidTokenError):
            issuer.verify("not.a.token")
