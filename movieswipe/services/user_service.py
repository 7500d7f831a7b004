"""User service for Google sign-in and profile management."""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from movieswipe.models.user import User
from movieswipe.schemas.user import ProfileUpdate, ProfileView, SessionClaims
from movieswipe.services.exceptions import (
    AccountDeactivated,
    IdentityNotVerified,
    UserNotFoundError,
    ValidationError,
)
from movieswipe.services.identity import IdentityTokenVerifier
from movieswipe.services.session_tokens import SessionTokenService
from movieswipe.services.user_store import Created, NewUser, UserStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful sign-in."""

    user: ProfileView
    token: str
    created: bool = False


class UserService:
    """Service for authentication and user profile management."""

    def __init__(
        self,
        db: Session,
        identity_verifier: IdentityTokenVerifier,
        session_tokens: SessionTokenService,
    ):
        """
        Initialize the user service.

        Args:
            db: SQLAlchemy database session
            identity_verifier: Google ID token verifier
            session_tokens: Session token issuer/verifier
        """
        self.store = UserStore(db)
        self.identity_verifier = identity_verifier
        self.session_tokens = session_tokens

    def authenticate(self, id_token: str) -> AuthResult:
        """
        Sign a user in with a Google ID token.

        Creates the local account on first sign-in; on later sign-ins
        refreshes name and picture from Google. Email and external id never
        change after creation.

        Args:
            id_token: Serialized Google ID token

        Returns:
            AuthResult with the profile view and a new session token

        Raises:
            ValidationError: If the token is empty
            IdentityVerificationFailed: If Google rejects the token
            IdentityNotVerified: If Google has not verified the email
            AccountDeactivated: If the account was deactivated
            DuplicateEmail: If another active account owns the email
        """
        if not id_token or not id_token.strip():
            raise ValidationError("ID token is required")

        claims = self.identity_verifier.verify(id_token.strip())

        if not claims.email_verified:
            logger.warning(f"Rejected sign-in for {claims.email}: email not verified")
            raise IdentityNotVerified()

        outcome = self.store.get_or_create(
            NewUser(
                external_id=claims.sub,
                email=claims.email,
                name=claims.display_name(),
                picture=claims.picture,
            )
        )
        user = outcome.user

        if isinstance(outcome, Created):
            logger.info(f"New account {user.id} created on first sign-in")
        else:
            if not user.is_active:
                logger.warning(f"Rejected sign-in for deactivated account {user.id}")
                raise AccountDeactivated()
            user.name = claims.display_name()
            if claims.picture is not None:
                user.picture = claims.picture
            user = self.store.save(user)

        token = self.session_tokens.issue(user.id, user.email)
        return AuthResult(
            user=ProfileView.model_validate(user),
            token=token,
            created=isinstance(outcome, Created),
        )

    def authorize(self, token: str) -> tuple[SessionClaims, User]:
        """
        Verify a session token and load the active user it refers to.

        Raises:
            TokenInvalid: If the token is malformed or badly signed
            TokenExpired: If the token is expired
            UserNotFoundError: If the user is missing or deactivated
        """
        claims = self.session_tokens.verify(token)
        user = self.store.find_active_by_id(claims.user_id)
        if user is None:
            raise UserNotFoundError(claims.user_id)
        return claims, user

    def get_profile(self, token: str) -> ProfileView:
        """Get the profile of the session's user."""
        _, user = self.authorize(token)
        return ProfileView.model_validate(user)

    def update_profile(self, token: str, data: ProfileUpdate) -> ProfileView:
        """
        Apply a partial update to the session's user.

        Only fields present in ``data`` are changed. ``updated_at`` is bumped
        even when nothing else changes.
        """
        _, user = self.authorize(token)

        for field, value in data.changes().items():
            setattr(user, field, value)

        user = self.store.save(user)
        if not user.is_active:
            logger.info(f"Deactivated user {user.id} via profile update")
        return ProfileView.model_validate(user)

    def deactivate_profile(self, token: str) -> None:
        """
        Deactivate (soft delete) the session's user.

        Inactive users are not found by ``authorize``, so calling this again
        with the same token raises ``UserNotFoundError``.
        """
        _, user = self.authorize(token)
        user.is_active = False
        self.store.save(user)
        logger.info(f"Deactivated user {user.id}")

    def exists_by_email(self, email: str) -> bool:
        """Check whether an active user owns the email."""
        return self.store.exists_by_email(email)

    def count_active_users(self) -> int:
        return self.store.count_active()
