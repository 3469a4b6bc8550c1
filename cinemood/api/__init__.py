"""HTTP API."""

from cinemood.api.router import api_router

__all__ = ["api_router"]
