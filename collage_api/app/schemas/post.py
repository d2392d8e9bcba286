"""
Pydantic models for collage posts.

``PostCreate`` is the body of the create endpoint; ``PostSummary`` is
the shape of one entry returned by the listing.  The full stored
record is returned by the get endpoint as‑is, so it has no response
model of its own.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class CollageItem(BaseModel):
    """One image of a collage, already uploaded to the CDN."""

    url: str = Field(..., example="https://res.cloudinary.com/demo/image/upload/v1/collages/case-1/01.jpg")
    caption: Optional[str] = Field(None, example="Night market")

    # Items are stored by value; keep whatever else the editor sent.
    model_config = {"extra": "allow"}


class PostCreate(BaseModel):
    slug: Optional[str] = Field(None, example="case-1")
    title: Optional[str] = Field(None, example="Café Night")
    date: Optional[str] = Field(None, example="2024-05-01")
    desc: Optional[str] = None
    tags: Optional[List[str]] = None
    items: Optional[List[CollageItem]] = None
    # Stored as sent when it is a real boolean, otherwise ``true``.
    visible: Any = None
    preview: Optional[str] = Field(None, description="Defaults to the first item's URL")


class PostSummary(BaseModel):
    """Schema for one post in the listing."""

    slug: str
    title: str
    date: Optional[str] = None
    created_at: Optional[str] = None
    tags: List[Any] = []
    items: List[Any] = []
    visible: bool = True
    preview: Optional[str] = None


class PostList(BaseModel):
    items: List[PostSummary]


class SlugRequest(BaseModel):
    """Body of the delete endpoint."""

    slug: Optional[str] = None


class VisibilityUpdate(BaseModel):
    slug: Optional[str] = None
    # Anything but a literal ``false`` makes the post visible.
    visible: Any = None


class MutationResult(BaseModel):
    ok: bool = True
    slug: str


class VisibilityResult(MutationResult):
    visible: bool
