"""API router configuration."""

from fastapi import APIRouter

from multichat.api.endpoints import chat, health

# Chat endpoints live under /api
api_router = APIRouter(prefix="/api")
api_router.include_router(chat.router)

# Health router at root level
health_router = health.router
