"""Service information endpoints."""

from fastapi import APIRouter, Depends

from collage_api.app.core.config import Settings, get_settings


router = APIRouter()


@router.get("/health")
async def health(settings: Settings = Depends(get_settings)) -> dict:
    """Liveness probe.  Does not touch the storage."""
    return {"status": "ok", "version": settings.api_version}
