"""API package - FastAPI routers and dependencies."""

from multichat.api.router import api_router, health_router

__all__ = ["api_router", "health_router"]
