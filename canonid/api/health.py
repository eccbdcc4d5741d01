"""Health check endpoint — verifies backend + backing store connection."""

from fastapi import APIRouter, Request

from canonid.core import redis_client
from canonid.core.config import settings

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Check backend status, registry size and store connectivity."""
    services = {}
    if settings.store_backend == "redis":
        services["redis"] = "ok" if redis_client.check_connection() else "error"

    all_ok = all(v == "ok" for v in services.values())

    return {
        "status": "ok" if all_ok else "degraded",
        "store_backend": settings.store_backend,
        "registered_prefixes": len(request.app.state.registry),
        "services": services,
    }
