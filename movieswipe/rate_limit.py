"""Per-client rate limiting."""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from movieswipe.config import settings
from movieswipe.schemas.common import failure


def current_rate_limit() -> str:
    """Limit string read on every request, so settings changes apply immediately."""
    return settings.rate_limit


# In-memory storage; limits are per process. No global limits, each
# endpoint opts in with the decorator below.
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],
    storage_uri="memory://",
    enabled=settings.RATE_LIMIT_ENABLED,
)

# Requires the endpoint to take a ``request: Request`` parameter
api_rate_limit = limiter.limit(current_rate_limit)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Render a rate limit rejection in the API envelope."""
    return JSONResponse(
        status_code=429,
        content=failure(
            "Too many requests from this IP, please try again later.",
            "RATE_LIMIT_EXCEEDED",
        ),
    )
