"""Custom exceptions for the service layer."""

from typing import Union
from uuid import UUID


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, code: str = "SERVICE_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(ServiceError):
    """Malformed input."""

    def __init__(self, message: str):
        super().__init__(message=message, code="VALIDATION_ERROR")


class AuthenticationError(ServiceError):
    """Authentication failed error."""

    def __init__(self, message: str = "Authentication failed", code: str = "UNAUTHORIZED"):
        super().__init__(message=message, code=code)


class TokenInvalid(AuthenticationError):
    """Session token is malformed, tampered with, or missing claims."""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message=message, code="TOKEN_INVALID")


class TokenExpired(AuthenticationError):
    """Session token is past its expiry."""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message=message, code="TOKEN_EXPIRED")


class IdentityVerificationFailed(AuthenticationError):
    """Identity assertion failed signature, audience, issuer or expiry checks."""

    def __init__(self, message: str = "Failed to verify Google token"):
        super().__init__(message=message, code="IDENTITY_VERIFICATION_FAILED")


class IdentityNotVerified(AuthenticationError):
    """Identity provider has not verified the email address."""

    def __init__(self, message: str = "Email not verified with Google"):
        super().__init__(message=message, code="IDENTITY_NOT_VERIFIED")


class AccountDeactivated(AuthenticationError):
    """Account behind a known external identity has been deactivated."""

    def __init__(self, message: str = "User account is deactivated"):
        super().__init__(message=message, code="ACCOUNT_DEACTIVATED")


class NotFoundError(ServiceError):
    """Resource not found error."""

    def __init__(self, resource_type: str, resource_id: Union[UUID, str]):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            message=f"{resource_type} with ID {resource_id} not found",
            code=f"{resource_type.upper()}_NOT_FOUND"
        )


class UserNotFoundError(NotFoundError):
    """User not found (or no longer active) error."""

    def __init__(self, user_id: Union[UUID, str]):
        super().__init__("User", user_id)


class ConflictError(ServiceError):
    """Uniqueness conflict on create."""

    def __init__(self, message: str, code: str = "CONFLICT"):
        super().__init__(message=message, code=code)


class DuplicateKey(ConflictError):
    """Unique constraint on external id or active email was violated."""

    def __init__(self, message: str = "User already exists"):
        super().__init__(message=message, code="DUPLICATE_KEY")


class DuplicateEmail(DuplicateKey):
    """An active user already owns this email under another identity."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(message="User already exists with this email")
        self.code = "DUPLICATE_EMAIL"


class StorageError(ServiceError):
    """Database failure."""

    def __init__(self, message: str = "Storage failure"):
        super().__init__(message=message, code="INTERNAL_SERVER_ERROR")
