"""
Post endpoints for API v1.

Route names follow the site's original function names so the existing
front end keeps working: ``list-posts``, ``get-post``, ``create-post``,
``delete-post`` and ``update-visible``.  Handlers only parse the
request and shape the response; errors raised by the services are
rendered by the application's ``CollageError`` handler.  The admin
routes parse their body only after ``require_admin`` has passed.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from collage_api.app.core.deps import get_post_service, parse_body
from collage_api.app.core.errors import Unauthorized
from collage_api.app.core.security import is_admin_request, require_admin
from collage_api.app.schemas.post import (
    MutationResult,
    PostCreate,
    PostList,
    SlugRequest,
    VisibilityResult,
    VisibilityUpdate,
)
from collage_api.app.services.post_service import PostService


router = APIRouter()


@router.get("/list-posts", response_model=PostList)
async def list_posts(
    show_hidden: Optional[str] = Query(None, alias="showHidden"),
    is_admin: bool = Depends(is_admin_request),
    service: PostService = Depends(get_post_service),
) -> PostList:
    """List posts, newest first.

    Hidden posts are only included with ``showHidden=1`` and a valid
    admin token; asking for them without one is rejected with 401.
    """
    include_hidden = show_hidden == "1"
    if include_hidden and not is_admin:
        raise Unauthorized("Unauthorized")
    return PostList(items=await service.list_posts(include_hidden=include_hidden))


@router.get("/get-post")
async def get_post(
    slug: Optional[str] = Query(None),
    service: PostService = Depends(get_post_service),
) -> JSONResponse:
    """Return the stored record of one post, hidden or not."""
    return JSONResponse(await service.get_post(slug))


@router.post("/create-post", response_model=MutationResult)
async def create_post(
    request: Request,
    admin: dict = Depends(require_admin),
    service: PostService = Depends(get_post_service),
) -> MutationResult:
    payload = await parse_body(request, PostCreate)
    slug = await service.create_post(payload)
    return MutationResult(slug=slug)


@router.post("/delete-post", response_model=MutationResult)
async def delete_post(
    request: Request,
    admin: dict = Depends(require_admin),
    service: PostService = Depends(get_post_service),
) -> MutationResult:
    """Delete a post's images, record and folder (admin only)."""
    payload = await parse_body(request, SlugRequest)
    slug = await service.delete_post(payload.slug)
    return MutationResult(slug=slug)


@router.post("/update-visible", response_model=VisibilityResult)
async def update_visible(
    request: Request,
    admin: dict = Depends(require_admin),
    service: PostService = Depends(get_post_service),
) -> VisibilityResult:
    """Show or hide a post.  Only a literal ``false`` hides it."""
    payload = await parse_body(request, VisibilityUpdate)
    visible = payload.visible is not False
    slug = await service.set_visibility(payload.slug, visible)
    return VisibilityResult(slug=slug, visible=visible)
