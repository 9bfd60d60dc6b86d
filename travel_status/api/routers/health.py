"""Health check router."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from travel_status.api.dependencies import Services, get_services
from travel_status.errors import CollaboratorFailure

router = APIRouter()


@router.get("/health")
async def health_check(services: Services = Depends(get_services)):
    """Report the store backend and, for the hosted store, whether it authenticates."""
    timestamp = datetime.now(timezone.utc).isoformat()
    if services.caspio is None:
        return {
            "status": "healthy",
            "mode": "mock",
            "customers": len(services.customers),
            "packages": len(services.packages),
            "active_calls": await services.tracker.store.count(),
            "timestamp": timestamp,
        }

    try:
        await services.caspio.access_token()
    except CollaboratorFailure as exc:
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "database": "disconnected", "error": exc.message},
        )
    return {
        "status": "healthy",
        "mode": "production",
        "database": "caspio",
        "active_calls": await services.tracker.store.count(),
        "timestamp": timestamp,
    }
