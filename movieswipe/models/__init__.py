"""Database models."""

from movieswipe.models.user import User

__all__ = ["User"]
