"""Pydantic schemas for users, identity claims and session tokens."""

from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import (
    AfterValidator,
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

from movieswipe.models.user import NAME_MAX_LENGTH

_http_url = TypeAdapter(AnyHttpUrl)


def _check_http_url(value: str) -> str:
    """Validate an http(s) URL but keep the string exactly as sent."""
    try:
        _http_url.validate_python(value)
    except ValidationError:
        raise ValueError("Invalid picture URL")
    return value


HttpUrlString = Annotated[str, AfterValidator(_check_http_url)]


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GoogleAuthRequest(CamelModel):
    """Request body for Google sign-in."""

    id_token: str = Field(..., min_length=1, description="Google ID token")

    @field_validator("id_token")
    @classmethod
    def strip_token(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("ID token is required")
        return value


class ProfileUpdate(CamelModel):
    """Partial profile update. Absent or null fields are left untouched."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
    picture: Optional[HttpUrlString] = Field(default=None, description="Profile picture URL")
    is_active: Optional[bool] = Field(default=None)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            value = value.strip()
            if not value:
                raise ValueError("Name is required")
        return value

    def changes(self) -> dict:
        """Fields that were provided with a value, keyed by attribute name."""
        return self.model_dump(exclude_none=True)


class ProfileView(CamelModel):
    """Public view of a user record."""

    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True
    )

    id: UUID = Field(..., description="Unique user identifier")
    email: str = Field(..., description="User email address")
    name: str = Field(..., description="Display name")
    picture: Optional[str] = Field(default=None, description="Profile picture URL")
    is_active: bool = Field(..., description="Whether the account is active")
    created_at: datetime = Field(..., description="Account creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class AuthResponse(BaseModel):
    """Payload returned by a successful sign-in."""

    user: ProfileView
    token: str = Field(..., description="Session token (JWT)")


class ExistsResponse(BaseModel):
    """Payload of the email existence check."""

    exists: bool


class EmailQuery(BaseModel):
    """Query parameters of the email existence check."""

    email: EmailStr


class IdentityClaims(BaseModel):
    """Verified claims extracted from a Google ID token."""

    sub: str
    email: str = ""
    email_verified: bool = False
    name: str = ""
    picture: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    iss: Optional[str] = None
    aud: Optional[str] = None
    iat: int = 0
    exp: int = 0

    def display_name(self) -> str:
        """Best available display name, never empty, at most 100 characters."""
        name = (self.name or "").strip()
        if not name:
            name = " ".join(p for p in (self.given_name, self.family_name) if p).strip()
        if not name:
            name = self.email.split("@", 1)[0] or self.sub
        return name[:NAME_MAX_LENGTH]


class SessionClaims(BaseModel):
    """Decoded session token claims."""

    user_id: UUID
    email: str
    issued_at: datetime
    expires_at: datetime
    token_id: Optional[str] = None
