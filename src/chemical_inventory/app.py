"""FastAPI application factory for the chemical inventory service."""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from chemical_inventory import __version__
from chemical_inventory.config import get_settings
from chemical_inventory.errors import (
    AuthorizationDenied,
    EntityNotEmptyError,
    InventoryError,
    NotFoundError,
    PermissionLookupError,
    ReferenceResolutionError,
    WriteError,
)
from chemical_inventory.logging import configure_logging, logger
from chemical_inventory.routes import api_router

ERROR_STATUS = {
    AuthorizationDenied: status.HTTP_403_FORBIDDEN,
    PermissionLookupError: status.HTTP_503_SERVICE_UNAVAILABLE,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ReferenceResolutionError: status.HTTP_409_CONFLICT,
    WriteError: status.HTTP_409_CONFLICT,
    EntityNotEmptyError: status.HTTP_409_CONFLICT,
}


async def inventory_error_handler(request: Request, exc: InventoryError) -> JSONResponse:
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    logger.warning(
        "Request failed",
        path=request.url.path,
        error=type(exc).__name__,
        step=exc.step,
        status_code=status_code,
    )
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "step": exc.step})


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_serialize)

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_exception_handler(InventoryError, inventory_error_handler)
    app.include_router(api_router)

    @app.get("/health", tags=["monitoring"], summary="Return service health status")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    return app
