"""User authentication and profile endpoints."""

import logging

from fastapi import APIRouter, Depends, Request, status

from movieswipe.api.dependencies import (
    get_bearer_token,
    get_current_session,
    get_user_service,
)
from movieswipe.api.errors import api_error, unauthorized
from movieswipe.rate_limit import api_rate_limit
from movieswipe.schemas.common import ApiResponse
from movieswipe.schemas.user import (
    AuthResponse,
    EmailQuery,
    ExistsResponse,
    GoogleAuthRequest,
    ProfileUpdate,
    ProfileView,
    SessionClaims,
)
from movieswipe.services.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ServiceError,
)
from movieswipe.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


def _profile_error(e: ServiceError):
    """Map a profile-flow service error onto an HTTP error."""
    if isinstance(e, AuthenticationError):
        return unauthorized(e.message, e.code)
    if isinstance(e, NotFoundError):
        return api_error(status.HTTP_404_NOT_FOUND, "User not found", "USER_NOT_FOUND")
    return api_error(status.HTTP_500_INTERNAL_SERVER_ERROR, e.message, e.code)


@router.post(
    "/auth/google",
    response_model=ApiResponse[AuthResponse],
    response_model_exclude_none=True,
    summary="Sign in with Google",
    description="""
    Exchange a Google ID token for a session token.

    The account is created on first sign-in. Later sign-ins refresh the
    name and picture from Google.
    """,
)
@api_rate_limit
def authenticate_with_google(
    request: Request,
    data: GoogleAuthRequest,
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse[AuthResponse]:
    """Authenticate with a Google ID token."""
    try:
        result = user_service.authenticate(data.id_token)
    except (AuthenticationError, ConflictError) as e:
        logger.info(f"Google sign-in failed: {e.message}")
        raise unauthorized("Authentication failed", e.message)

    return ApiResponse[AuthResponse](
        success=True,
        message="Authentication successful",
        data=AuthResponse(user=result.user, token=result.token),
    )


@router.post(
    "/auth/signout",
    response_model=ApiResponse[None],
    response_model_exclude_none=True,
    summary="Sign out",
    description="""
    Session tokens are stateless and cannot be revoked server-side; the
    client is expected to discard its token.
    """,
)
@api_rate_limit
def sign_out(
    request: Request,
    session: SessionClaims = Depends(get_current_session),
) -> ApiResponse[None]:
    """Sign out (client-side token removal)."""
    logger.info(f"User {session.user_id} signed out")
    return ApiResponse[None](
        success=True,
        message="Sign out successful. Please remove the token from client storage.",
    )


@router.get(
    "/profile",
    response_model=ApiResponse[ProfileView],
    response_model_exclude_none=True,
    summary="Get current user profile",
)
@api_rate_limit
def get_profile(
    request: Request,
    token: str = Depends(get_bearer_token),
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse[ProfileView]:
    """Get the signed-in user's profile."""
    try:
        profile = user_service.get_profile(token)
    except ServiceError as e:
        raise _profile_error(e)

    return ApiResponse[ProfileView](
        success=True,
        message="User profile retrieved successfully",
        data=profile,
    )


@router.put(
    "/profile",
    response_model=ApiResponse[ProfileView],
    response_model_exclude_none=True,
    summary="Update current user profile",
    description="Partial update: only the fields sent are changed.",
)
@api_rate_limit
def update_profile(
    request: Request,
    data: ProfileUpdate,
    token: str = Depends(get_bearer_token),
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse[ProfileView]:
    """Update the signed-in user's profile."""
    try:
        profile = user_service.update_profile(token, data)
    except ServiceError as e:
        raise _profile_error(e)

    return ApiResponse[ProfileView](
        success=True,
        message="User profile updated successfully",
        data=profile,
    )


@router.delete(
    "/profile",
    response_model=ApiResponse[None],
    response_model_exclude_none=True,
    summary="Deactivate current user account",
    description="Soft delete: the account is kept but can no longer be used.",
)
@api_rate_limit
def deactivate_profile(
    request: Request,
    token: str = Depends(get_bearer_token),
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse[None]:
    """Deactivate the signed-in user's account."""
    try:
        user_service.deactivate_profile(token)
    except ServiceError as e:
        raise _profile_error(e)

    return ApiResponse[None](
        success=True,
        message="User account deactivated successfully",
    )


@router.get(
    "/exists",
    response_model=ApiResponse[ExistsResponse],
    response_model_exclude_none=True,
    summary="Check if a user exists by email",
)
@api_rate_limit
def check_user_exists(
    request: Request,
    query: EmailQuery = Depends(),
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse[ExistsResponse]:
    """Check whether an active account uses the email."""
    exists = user_service.exists_by_email(query.email)

    return ApiResponse[ExistsResponse](
        success=True,
        message="User existence check completed",
        data=ExistsResponse(exists=exists),
    )
