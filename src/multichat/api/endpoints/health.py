"""Health check endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from multichat.api.dependencies import get_provider_factory
from multichat.observability.constants import SERVICE_NAME
from multichat.providers.factory import ProviderFactory

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    """Basic health check endpoint."""
    return {"status": "healthy", "service": SERVICE_NAME}


@router.get("/ready")
async def ready(
    factory: Annotated[ProviderFactory, Depends(get_provider_factory)],
) -> dict:
    """
    Readiness check.

    The service is always ready: every provider ends in a local simulation.
    ``checks`` reports, per provider, the tier that will be tried first, so
    a missing credential shows up as ``simulated`` (or a lower tier).
    """
    return {
        "status": "ready",
        "checks": factory.readiness(),
    }
