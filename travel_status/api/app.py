"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from travel_status import __version__
from travel_status.api.dependencies import Services, build_services
from travel_status.api.routers import calls, customers, health, logic, memos
from travel_status.errors import CollaboratorFailure, InputValidationError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup and shutdown events."""
    services: Services = app.state.services
    logger.info(
        "Starting %s (store backend: %s)",
        services.config.service_name, services.config.store.backend,
    )
    yield
    active = await services.tracker.active_calls()
    if active:
        logger.warning("Shutting down with %d active call(s) still tracked", len(active))
    await services.close()
    logger.info("Shut down %s", services.config.service_name)


async def _input_validation_handler(request: Request, exc: InputValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "validation_error", "message": exc.message, "accepted": exc.accepted},
    )


async def _collaborator_failure_handler(request: Request, exc: CollaboratorFailure) -> JSONResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content={"error": "service_unavailable", "service": exc.service, "message": exc.message},
    )


def create_app(services: Optional[Services] = None) -> FastAPI:
    """Create the application around a service container (built from settings if omitted)."""
    services = services or build_services()

    app = FastAPI(
        title="Travel Customer Status API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_exception_handler(InputValidationError, _input_validation_handler)
    app.add_exception_handler(CollaboratorFailure, _collaborator_failure_handler)

    app.include_router(health.router, tags=["Health"])
    app.include_router(customers.router, tags=["Customers"])
    app.include_router(logic.router, tags=["Logic"])
    app.include_router(memos.router, tags=["Memos"])
    app.include_router(calls.router, tags=["Calls"])
    return app


app = create_app()
