"""User account model."""

import uuid

from sqlalchemy import Column, String, Boolean, Index
from sqlalchemy.dialects.postgresql import UUID

from movieswipe.db.base import Base, TimestampMixin

NAME_MAX_LENGTH = 100


class User(TimestampMixin, Base):
    """
    Local account bound to exactly one external (Google) identity.

    Rows are never deleted; deactivation clears ``is_active``. Email
    uniqueness only applies to active rows, so the unique index on email
    is partial.
    """

    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Google "sub" claim, immutable after creation
    external_id = Column(String(255), nullable=False, unique=True, index=True)

    # Always stored lowercase
    email = Column(String(255), nullable=False, index=True)
    name = Column(String(NAME_MAX_LENGTH), nullable=False)
    picture = Column(String(2048), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    __table_args__ = (
        Index(
            "uq_users_email_active",
            "email",
            unique=True,
            postgresql_where=is_active.is_(True),
            sqlite_where=is_active.is_(True),
        ),
        Index("ix_users_external_id_active", "external_id", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
