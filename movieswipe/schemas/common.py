"""Response envelope shared by every endpoint."""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope for API responses: ``{success, message, data?, error?}``."""

    success: bool = Field(..., description="Whether the request succeeded")
    message: str = Field(..., description="Human-readable outcome")
    data: Optional[T] = Field(default=None, description="Response payload")
    error: Optional[str] = Field(default=None, description="Machine-readable error code or detail")


def failure(message: str, error: str) -> dict:
    """Build a failure envelope."""
    return {"success": False, "message": message, "error": error}
