"""Session token issuing and verification."""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from jose import jwt, ExpiredSignatureError, JWTError

from movieswipe.config import Settings, settings as default_settings
from movieswipe.schemas.user import SessionClaims
from movieswipe.services.exceptions import TokenExpired, TokenInvalid

logger = logging.getLogger(__name__)


class SessionTokenService:
    """
    Mints and verifies self-contained, HMAC-signed session tokens.

    Tokens are never stored server-side; expiry is the only time-based
    invalidation.
    """

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or default_settings
        self.secret = settings.jwt_secret
        self.algorithm = settings.JWT_ALGORITHM
        self.lifetime = timedelta(minutes=settings.SESSION_TOKEN_EXPIRE_MINUTES)

    def issue(self, user_id: UUID, email: str, issued_at: Optional[datetime] = None) -> str:
        """
        Create a signed session token for a user.

        Args:
            user_id: Internal user ID
            email: User email
            issued_at: Issue time, defaults to now

        Returns:
            JWT token string
        """
        issued_at = issued_at or datetime.now(timezone.utc)
        payload = {
            "userId": str(user_id),
            "email": email,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.lifetime).timestamp()),
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> SessionClaims:
        """
        Verify a session token and decode its claims.

        Raises:
            TokenExpired: If the token is past its expiry
            TokenInvalid: If the token is malformed, badly signed or incomplete
        """
        if not token:
            raise TokenInvalid("Access token is required")

        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require_exp": True, "require_iat": True},
            )
        except ExpiredSignatureError:
            raise TokenExpired()
        except JWTError as e:
            logger.debug(f"Rejected session token: {e}")
            raise TokenInvalid()

        try:
            return SessionClaims(
                user_id=UUID(payload["userId"]),
                email=payload["email"],
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                token_id=payload.get("jti"),
            )
        except (KeyError, TypeError, ValueError):
            raise TokenInvalid("Invalid token payload")
