"""Pytest configuration and fixtures."""

import os

# Must be set before the application modules read their settings
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["GOOGLE_CLIENT_ID"] = "test-client-id.apps.googleusercontent.com"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from movieswipe.main import app
from movieswipe.db.base import Base
from movieswipe.db.session import get_db
from movieswipe.api.dependencies import get_identity_verifier
from movieswipe.rate_limit import limiter
from movieswipe.schemas.user import IdentityClaims
from movieswipe.services.exceptions import IdentityVerificationFailed
from movieswipe.services.session_tokens import SessionTokenService
from movieswipe.services.user_service import UserService


# In-memory SQLite for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

API_PREFIX = "/api/users"


class FakeIdentityVerifier:
    """Identity verifier that accepts only tokens registered by the test."""

    def __init__(self):
        self._tokens = {}

    def register(
        self,
        token: str,
        sub: str,
        email: str,
        name: str = "Test User",
        email_verified: bool = True,
        picture: str = None,
    ) -> str:
        self._tokens[token] = IdentityClaims(
            sub=sub,
            email=email,
            email_verified=email_verified,
            name=name,
            picture=picture,
            iss="https://accounts.google.com",
            aud="test-client-id.apps.googleusercontent.com",
        )
        return token

    def verify(self, assertion: str) -> IdentityClaims:
        try:
            return self._tokens[assertion]
        except KeyError:
            raise IdentityVerificationFailed("Failed to verify Google token: Could not verify token signature.")

    def close(self) -> None:
        pass


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def identity_verifier():
    """Create a fake Google token verifier."""
    return FakeIdentityVerifier()


@pytest.fixture
def session_tokens():
    return SessionTokenService()


@pytest.fixture
def user_service(db_session, identity_verifier, session_tokens):
    return UserService(db_session, identity_verifier, session_tokens)


@pytest.fixture(scope="function")
def client(db_session, identity_verifier):
    """Create a test client with overridden dependencies."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    def override_get_identity_verifier():
        return identity_verifier

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_verifier] = override_get_identity_verifier
    limiter.enabled = False

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def signed_in(client, identity_verifier):
    """Sign a test user in through the API and return the response data."""
    identity_verifier.register("google-token-1", sub="g-1", email="Test@Example.com", name="Test User")
    response = client.post(f"{API_PREFIX}/auth/google", json={"idToken": "google-token-1"})
    assert response.status_code == 200
    return response.json()["data"]


@pytest.fixture
def auth_headers(signed_in):
    """Return authorization headers for authenticated requests."""
    return {"Authorization": f"Bearer {signed_in['token']}"}
