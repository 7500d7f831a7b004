"""Pydantic schemas for request/response validation."""

from movieswipe.schemas.common import ApiResponse
from movieswipe.schemas.user import (
    AuthResponse,
    ExistsResponse,
    GoogleAuthRequest,
    IdentityClaims,
    ProfileUpdate,
    ProfileView,
    SessionClaims,
)

__all__ = [
    "ApiResponse",
    "AuthResponse",
    "ExistsResponse",
    "GoogleAuthRequest",
    "IdentityClaims",
    "ProfileUpdate",
    "ProfileView",
    "SessionClaims",
]
