"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from movieswipe.api.errors import register_exception_handlers
from movieswipe.api.router import api_router
from movieswipe.config import settings, validate_environment
from movieswipe.db.base import Base
from movieswipe.db.session import dispose_engine, engine
from movieswipe.logging_config import RequestLoggingMiddleware, setup_logging
from movieswipe.rate_limit import limiter, rate_limit_exceeded_handler
from movieswipe.services.identity import IdentityTokenVerifier

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    validate_environment(settings)
    Base.metadata.create_all(bind=engine)
    app.state.identity_verifier = IdentityTokenVerifier(settings)
    logger.info(f"{settings.APP_NAME} started ({settings.ENVIRONMENT})")
    yield
    app.state.identity_verifier.close()
    dispose_engine()


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    setup_logging()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Google sign-in, session tokens and user profiles for MovieSwipe.",
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        docs_url=f"{settings.API_PREFIX}/docs",
        redoc_url=f"{settings.API_PREFIX}/redoc",
        lifespan=lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    register_exception_handlers(app)

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL] if settings.FRONTEND_URL else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix=settings.API_PREFIX)

    return app


app = create_application()


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {
        "success": True,
        "message": f"{settings.APP_NAME} is running",
        "data": {
            "status": "healthy",
            "service": settings.APP_NAME,
            "environment": settings.ENVIRONMENT,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    }
