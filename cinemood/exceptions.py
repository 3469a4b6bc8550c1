"""Domain exceptions and their HTTP handlers."""

from fastapi import Request
from fastapi.responses import JSONResponse

from cinemood.utils.logging import get_logger

logger = get_logger(__name__)

EXHAUSTION_MESSAGE = "No recommendations match your preferences. Try adjusting them."


class CineMoodError(Exception):
    """Base exception for the application."""


class PreferenceValidationError(CineMoodError):
    """A required preference step is missing or invalid."""

    def __init__(self, message: str, step: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.step = step


class TransportError(CineMoodError):
    """TMDB could not be reached or answered with an error."""


class CacheError(CineMoodError):
    """The cache backend failed to read or write."""


class ExhaustionError(CineMoodError):
    """No unseen recommendations are left and no more pages exist."""

    def __init__(self, message: str = EXHAUSTION_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


async def preference_validation_handler(
    request: Request, exc: PreferenceValidationError
) -> JSONResponse:
    logger.info(f"Preference validation failed on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=400,
        content={"error": exc.message, "step": exc.step},
    )


async def exhaustion_handler(request: Request, exc: ExhaustionError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": exc.message})
