"""ZIP export endpoint."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from collage_api.app.core.deps import get_archive_service
from collage_api.app.services.archive_service import ArchiveService


router = APIRouter()


@router.get("/zip-images")
async def zip_images(
    slug: Optional[str] = Query(None),
    service: ArchiveService = Depends(get_archive_service),
) -> Response:
    """Download every image of a post as a ZIP archive."""
    archive = await service.export_archive(slug)
    headers = {
        "Content-Disposition": archive.content_disposition,
        "Cache-Control": "no-store",
    }
    return Response(content=archive.content, media_type="application/zip", headers=headers)
