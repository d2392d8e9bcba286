"""
Business logic for collage posts.

The ``PostService`` reads and writes posts through the record resolver
and the storage client it is constructed with.  There is no locking:
the storage is the only shared resource, and two concurrent visibility
updates of the same post race with the last write winning.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..core.errors import BadRequest
from ..schemas.post import PostCreate, PostSummary
from ..storage.client import IMAGE, RAW
from .record_resolver import RecordResolver


logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def clean_slug(slug: Optional[str]) -> str:
    """Trim and validate a slug, raising ``BadRequest`` if unusable."""
    value = (slug or "").strip()
    if not value:
        raise BadRequest("slug required")
    if "/" in value:
        raise BadRequest("invalid slug")
    return value


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO date or date‑time; anything else sorts as the epoch."""
    if not value or not isinstance(value, str):
        return EPOCH
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def utc_now_iso() -> str:
    """Current UTC time as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def summarize(slug: str, data: Dict[str, Any]) -> PostSummary:
    """Build the listing view of a stored record."""
    items = data.get("items") if isinstance(data.get("items"), list) else []
    first_url = None
    if items and isinstance(items[0], dict):
        first_url = items[0].get("url") or None
    preview = data.get("preview") or data.get("cover") or first_url
    date = data.get("date") or data.get("created_at")
    tags = data.get("tags") if isinstance(data.get("tags"), list) else []
    return PostSummary(
        slug=slug,
        title=str(data.get("title") or slug),
        date=str(date) if date else None,
        created_at=str(data["created_at"]) if data.get("created_at") else None,
        tags=tags,
        items=items,
        visible=data.get("visible") is not False,
        preview=str(preview) if preview else None,
    )


class PostService:
    """Operations on collage posts."""

    def __init__(self, resolver: RecordResolver, storage) -> None:
        self.resolver = resolver
        self.storage = storage

    async def list_posts(self, include_hidden: bool = False) -> List[PostSummary]:
        """Return every post, newest first.

        Hidden posts (``visible`` stored as ``false``) are excluded
        unless ``include_hidden`` is set.  Posts whose record cannot be
        read are silently left out.
        """
        resolved = await self.resolver.resolve_all()
        posts = [summarize(slug, data) for slug, data in resolved]
        posts.sort(key=lambda p: parse_timestamp(p.date or p.created_at), reverse=True)
        if not include_hidden:
            posts = [p for p in posts if p.visible]
        return posts

    async def get_post(self, slug: Optional[str]) -> Dict[str, Any]:
        """Return the stored record of ``slug`` as‑is."""
        _, data = await self.resolver.resolve(clean_slug(slug))
        return data

    async def create_post(self, payload: PostCreate) -> str:
        """Validate ``payload`` and store it as a new record.

        Writing to an existing slug replaces that post.
        """
        slug = clean_slug(payload.slug)
        if not payload.items:
            raise BadRequest("items required")

        items = [item.model_dump(exclude_none=True) for item in payload.items]
        record = {
            "slug": slug,
            "title": payload.title,
            "date": payload.date,
            "desc": payload.desc or "",
            "tags": payload.tags or [],
            "items": items,
            "created_at": utc_now_iso(),
            "preview": payload.preview or items[0].get("url") or None,
            "visible": payload.visible if isinstance(payload.visible, bool) else True,
        }
        await self.resolver.write_back(slug, record)
        logger.info("Created post %s with %d items", slug, len(items))
        return slug

    async def delete_post(self, slug: Optional[str]) -> str:
        """Delete every stored object of ``slug`` and then its folder."""
        slug = clean_slug(slug)
        prefix = self.resolver.slug_prefix(slug)
        await asyncio.to_thread(self.storage.delete_by_prefix, prefix, IMAGE)
        await asyncio.to_thread(self.storage.delete_by_prefix, prefix, RAW)
        await asyncio.to_thread(self.storage.delete_folder, prefix)
        logger.info("Deleted post %s", slug)
        return slug

    async def set_visibility(self, slug: Optional[str], visible: bool) -> str:
        """Read the current record, change ``visible`` and write it back.

        The write always targets the canonical key, which collapses any
        ``data.json`` duplicate on the next resolution.
        """
        slug = clean_slug(slug)
        _, data = await self.resolver.resolve(slug)
        data["visible"] = visible
        await self.resolver.write_back(slug, data)
        logger.info("Set visibility of %s to %s", slug, visible)
        return slug
