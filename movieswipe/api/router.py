"""API router aggregation."""

from fastapi import APIRouter

from movieswipe.api import users

api_router = APIRouter()

api_router.include_router(users.router, tags=["Users"])
