"""Tests for session token issuing and verification."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from jose import jwt

from movieswipe.config import Settings
from movieswipe.services.exceptions import AuthenticationError, TokenExpired, TokenInvalid
from movieswipe.services.session_tokens import SessionTokenService


class TestSessionTokens:

    def test_round_trip(self, session_tokens):
        user_id = uuid4()
        token = session_tokens.issue(user_id, "a@x.com")

        claims = session_tokens.verify(token)

        assert claims.user_id == user_id
        assert claims.email == "a@x.com"
        assert claims.expires_at - claims.issued_at == timedelta(days=7)
        assert claims.token_id

    def test_claim_names(self, session_tokens):
        token = session_tokens.issue(uuid4(), "a@x.com")
        payload = jwt.get_unverified_claims(token)
        assert set(payload) == {"userId", "email", "iat", "exp", "jti"}

    def test_expired(self, session_tokens):
        issued_at = datetime.now(timezone.utc) - timedelta(days=7, seconds=5)
        token = session_tokens.issue(uuid4(), "a@x.com", issued_at=issued_at)

        with pytest.raises(TokenExpired):
            session_tokens.verify(token)

    def test_just_before_expiry(self, session_tokens):
        issued_at = datetime.now(timezone.utc) - timedelta(days=7) + timedelta(minutes=1)
        token = session_tokens.issue(uuid4(), "a@x.com", issued_at=issued_at)
        assert session_tokens.verify(token).email == "a@x.com"

    def test_configurable_lifetime(self):
        service = SessionTokenService(Settings(SESSION_TOKEN_EXPIRE_MINUTES=5, JWT_SECRET="s"))
        issued_at = datetime.now(timezone.utc) - timedelta(minutes=6)
        token = service.issue(uuid4(), "a@x.com", issued_at=issued_at)

        with pytest.raises(TokenExpired):
            service.verify(token)

    def test_tampered_signature(self, session_tokens):
        token = session_tokens.issue(uuid4(), "a@x.com")
        header, payload, signature = token.split(".")
        forged = ".".join([header, payload, signature[::-1]])

        with pytest.raises(TokenInvalid):
            session_tokens.verify(forged)

    def test_wrong_secret(self, session_tokens):
        other = SessionTokenService(Settings(JWT_SECRET="another-secret"))
        token = other.issue(uuid4(), "a@x.com")

        with pytest.raises(TokenInvalid):
            session_tokens.verify(token)

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_malformed(self, session_tokens, token):
        with pytest.raises(TokenInvalid):
            session_tokens.verify(token)

    def test_missing_user_id(self, session_tokens):
        now = int(datetime.now(timezone.utc).timestamp())
        token = jwt.encode(
            {"email": "a@x.com", "iat": now, "exp": now + 60},
            session_tokens.secret,
            algorithm=session_tokens.algorithm,
        )
        with pytest.raises(TokenInvalid):
            session_tokens.verify(token)

    def test_errors_are_authentication_errors(self):
        assert issubclass(TokenInvalid, AuthenticationError)
        assert issubclass(TokenExpired, AuthenticationError)
