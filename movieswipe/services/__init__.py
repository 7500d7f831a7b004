"""Business logic services."""

from movieswipe.services.identity import IdentityTokenVerifier
from movieswipe.services.session_tokens import SessionTokenService
from movieswipe.services.user_service import AuthResult, UserService
from movieswipe.services.user_store import Created, Found, NewUser, UserStore

__all__ = [
    "AuthResult",
    "Created",
    "Found",
    "IdentityTokenVerifier",
    "NewUser",
    "SessionTokenService",
    "UserService",
    "UserStore",
]
