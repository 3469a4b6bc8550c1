"""FastAPI application: middleware, lifespan and the health probe."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.gzip import GZipMiddleware
from starlette.middleware.sessions import SessionMiddleware

from cinemood import __version__
from cinemood.api import api_router
from cinemood.config import get_settings
from cinemood.constants import SESSION_COOKIE_NAME, SESSION_TIMEOUT_DAYS
from cinemood.db import async_session_maker, dispose_db, init_db
from cinemood.exceptions import (
    ExhaustionError,
    PreferenceValidationError,
    exhaustion_handler,
    preference_validation_handler,
)
from cinemood.services.selection import TrackerRegistry
from cinemood.utils.cache import cache
from cinemood.utils.http_client import close_tmdb_client
from cinemood.utils.logging import get_logger, setup_logging

settings = get_settings()
setup_logging()
logger = get_logger(__name__)

STARTED_AT = datetime.now(UTC)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    await init_db()
    if not await cache.connect():
        logger.warning("Redis unavailable, TMDB responses will not be cached")
    logger.info(f"{settings.app_name} {__version__} started ({settings.app_env})")

    yield

    # Recommendation sessions do not survive a restart
    app.state.trackers.clear()
    await cache.close()
    await close_tmdb_client()
    await dispose_db()
    logger.info("Shutdown complete")


app = FastAPI(title=settings.app_name, version=__version__, lifespan=lifespan)
app.state.trackers = TrackerRegistry()

# Middleware (order matters - first added = last executed)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=500)

if settings.is_development:
    cors_origins = ["http://localhost:3000", "http://localhost:8080", "http://127.0.0.1:8080"]
else:
    cors_origins = [settings.app_url]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type"],
)

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.app_secret_key,
    session_cookie=SESSION_COOKIE_NAME,
    max_age=60 * 60 * 24 * SESSION_TIMEOUT_DAYS,
    same_site="lax",
    https_only=settings.is_production,
)

app.add_exception_handler(PreferenceValidationError, preference_validation_handler)
app.add_exception_handler(ExhaustionError, exhaustion_handler)

app.include_router(api_router)


async def _database_ok() -> bool:
    try:
        async with async_session_maker() as db:
            await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Health check: database unreachable: {e}")
        return False
    return True


async def _redis_ok() -> bool:
    try:
        return bool(await cache.ping())
    except (RedisError, OSError) as e:
        logger.warning(f"Health check: redis unreachable: {e}")
        return False


@app.get("/health", tags=["monitoring"])
async def health_check() -> JSONResponse:
    """Report database and Redis reachability; 503 when either is down."""
    checks = {
        "database": await _database_ok(),
        "redis": await _redis_ok(),
    }
    healthy = all(checks.values())
    now = datetime.now(UTC)
    body = {
        "status": "healthy" if healthy else "degraded",
        "timestamp": now.isoformat(),
        "uptime_seconds": (now - STARTED_AT).total_seconds(),
        "version": __version__,
        "checks": {
            name: {"status": "healthy" if ok else "unhealthy"} for name, ok in checks.items()
        },
    }
    return JSONResponse(content=body, status_code=200 if healthy else 503)
