"""API dependencies for dependency injection."""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from movieswipe.api.errors import unauthorized
from movieswipe.db.session import get_db
from movieswipe.schemas.user import SessionClaims
from movieswipe.services.exceptions import AuthenticationError, NotFoundError
from movieswipe.services.identity import IdentityTokenVerifier
from movieswipe.services.session_tokens import SessionTokenService
from movieswipe.services.user_service import UserService

logger = logging.getLogger(__name__)

# Missing credentials are reported by get_bearer_token, not by HTTPBearer
security = HTTPBearer(auto_error=False)


def get_identity_verifier(request: Request) -> IdentityTokenVerifier:
    """Get the process-wide Google token verifier created at startup."""
    return request.app.state.identity_verifier


def get_session_tokens() -> SessionTokenService:
    return SessionTokenService()


def get_user_service(
    db: Session = Depends(get_db),
    identity_verifier: IdentityTokenVerifier = Depends(get_identity_verifier),
    session_tokens: SessionTokenService = Depends(get_session_tokens),
) -> UserService:
    """Get user service instance."""
    return UserService(db, identity_verifier, session_tokens)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """
    Extract the session token from the Authorization header.

    Raises:
        HTTPException: 401 if no bearer token was sent
    """
    if credentials is None or not credentials.credentials:
        raise unauthorized("Access token is required")
    return credentials.credentials


def get_current_session(
    token: str = Depends(get_bearer_token),
    user_service: UserService = Depends(get_user_service),
) -> SessionClaims:
    """
    Require a valid session token referring to an active user.

    Raises:
        HTTPException: 401 if the token is invalid, expired, or its user is
            missing or deactivated
    """
    try:
        claims, _ = user_service.authorize(token)
        return claims
    except AuthenticationError as e:
        raise unauthorized(e.message, e.code)
    except NotFoundError:
        raise unauthorized("Invalid or expired token")


def get_optional_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    user_service: UserService = Depends(get_user_service),
) -> Optional[SessionClaims]:
    """Like get_current_session, but any failure means "not signed in"."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        claims, _ = user_service.authorize(credentials.credentials)
        return claims
    except (AuthenticationError, NotFoundError) as e:
        logger.debug(f"Ignoring unusable session token: {e}")
        return None
