"""
Top‑level router for version 1 of the API.

Paths are flat (``/list-posts``, ``/admin-login``...) because the front
end calls them by name; tags group them in the OpenAPI docs.
"""

from fastapi import APIRouter

from .endpoints import archive, auth, info, posts

router = APIRouter()

router.include_router(posts.router, tags=["posts"])
router.include_router(archive.router, tags=["archive"])
router.include_router(auth.router, tags=["auth"])
router.include_router(info.router, tags=["info"])
