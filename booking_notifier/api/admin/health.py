"""
Liveness and readiness endpoints.
"""
from fastapi import APIRouter, HTTPException, Request
from starlette.status import HTTP_200_OK, HTTP_503_SERVICE_UNAVAILABLE

from booking_notifier import __version__
from booking_notifier.db.session import check_db_ready

router = APIRouter(tags=["health"])


@router.get("/", status_code=HTTP_200_OK)
async def root() -> dict:
    """Liveness endpoint."""
    return {"message": "WhatsApp Notification Backend API", "version": __version__, "status": "running"}


@router.get("/admin/health", status_code=HTTP_200_OK)
async def health(request: Request) -> dict:
    """Shallow health endpoint with the configured brands and catalog version."""
    brands = request.app.state.brands
    catalog = request.app.state.catalog
    return {
        "status": "ok",
        "version": __version__,
        "catalog_version": catalog.version,
        "brands": {brand.key: {"configured": brand.has_credentials} for brand in brands},
    }


@router.get("/admin/ready", status_code=HTTP_200_OK)
async def ready() -> dict:
    """Readiness of the message log store. Sends still work without it."""
    if not await check_db_ready():
        raise HTTPException(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="Database not ready")
    return {"status": "ready"}
