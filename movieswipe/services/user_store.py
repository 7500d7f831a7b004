"""Persistence operations over user records."""

import logging
from dataclasses import dataclass
from typing import Optional, Union
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from movieswipe.db.base import utcnow
from movieswipe.models.user import User
from movieswipe.services.exceptions import (
    DuplicateEmail,
    DuplicateKey,
    StorageError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass(frozen=True)
class NewUser:
    """Data needed to create a user record."""

    external_id: str
    email: str
    name: str
    picture: Optional[str] = None


@dataclass(frozen=True)
class Created:
    """``get_or_create`` outcome: a new record was inserted."""

    user: User


@dataclass(frozen=True)
class Found:
    """``get_or_create`` outcome: a record with the external id already existed."""

    user: User


class UserStore:
    """
    Store for user records.

    Lookups by email only consider active records. Emails are normalized to
    lowercase on every write and every lookup. Uniqueness of external id and
    of active emails is enforced by the database indexes; the checks done
    here only produce nicer errors for the common case.
    """

    def __init__(self, db: Session):
        """
        Initialize the user store.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def find_by_id(self, user_id: UUID) -> Optional[User]:
        return self.db.get(User, user_id)

    def find_active_by_id(self, user_id: UUID) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id, User.is_active.is_(True)).first()

    def find_by_external_id(self, external_id: str) -> Optional[User]:
        """Find a record by external subject id, active or not."""
        return self.db.query(User).filter(User.external_id == external_id).first()

    def find_by_email(self, email: str) -> Optional[User]:
        """Find the active record owning an email."""
        return self.db.query(User).filter(
            User.email == normalize_email(email),
            User.is_active.is_(True),
        ).first()

    def exists_by_email(self, email: str) -> bool:
        return self.find_by_email(email) is not None

    def count_active(self) -> int:
        return self.db.query(func.count(User.id)).filter(User.is_active.is_(True)).scalar() or 0

    def create(self, data: NewUser) -> User:
        """
        Insert a new active user record.

        Raises:
            DuplicateEmail: If an active record already uses the email
            DuplicateKey: If the external id is already taken
            StorageError: On any other database failure
        """
        email = normalize_email(data.email)

        if self.find_by_external_id(data.external_id) is not None:
            raise DuplicateKey("User already exists with this external ID")
        if self.find_by_email(email) is not None:
            raise DuplicateEmail(email)

        user = User(
            external_id=data.external_id,
            email=email,
            name=data.name,
            picture=data.picture,
            is_active=True,
        )
        self.db.add(user)

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.info(f"Unique constraint violated creating user {email}: {e.orig}")
            raise DuplicateKey()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create user {email}: {e}")
            raise StorageError("Failed to create user")

        self.db.refresh(user)
        logger.info(f"Created user {user.id} with email {user.email}")
        return user

    def save(self, user: User) -> User:
        """
        Persist changes to an existing record and bump ``updated_at``.

        Raises:
            UserNotFoundError: If the row disappeared since it was loaded
            DuplicateKey: If the change violates a unique index
            StorageError: On any other database failure
        """
        user.email = normalize_email(user.email)
        user.updated_at = utcnow()
        user_id = user.id

        try:
            self.db.commit()
        except StaleDataError:
            self.db.rollback()
            raise UserNotFoundError(user_id)
        except IntegrityError as e:
            self.db.rollback()
            logger.info(f"Unique constraint violated saving user {user_id}: {e.orig}")
            raise DuplicateKey()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save user {user_id}: {e}")
            raise StorageError("Failed to update user")

        self.db.refresh(user)
        return user

    def get_or_create(self, data: NewUser) -> Union[Created, Found]:
        """
        Return the record for an external id, creating it if absent.

        Two concurrent first logins for the same external id race on the
        unique index; the loser re-reads and reports ``Found``.

        Raises:
            DuplicateEmail: If the email belongs to another active identity
        """
        existing = self.find_by_external_id(data.external_id)
        if existing is not None:
            return Found(existing)

        try:
            return Created(self.create(data))
        except DuplicateKey as e:
            existing = self.find_by_external_id(data.external_id)
            if existing is not None:
                return Found(existing)
            if isinstance(e, DuplicateEmail):
                raise
            raise DuplicateEmail(normalize_email(data.email))
