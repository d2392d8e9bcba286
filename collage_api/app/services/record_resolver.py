"""
Slug → canonical record resolution.

A post is stored as a raw JSON object under ``<prefix>/<slug>/``.  Over
time the storage may hold several physical objects for one post: the
canonical extensionless key ``<prefix>/<slug>/data`` and a legacy
``<prefix>/<slug>/data.json`` left behind by earlier writes, each with
its own version.  The resolver deterministically picks one of them,
fetches it through a version‑pinned URL and, for mutations, writes the
result back to the canonical key so that duplicates converge.

Selection order (a left fold over the candidates):

* an extensionless key beats a ``.json`` key, whatever their versions;
* with the same suffix status, the strictly greater version wins;
* ties keep the candidate seen first.

Listing mode (:meth:`RecordResolver.resolve_all`) is best effort by
contract: every slug is fetched concurrently and a slug whose fetch or
parse fails is logged and left out of the result instead of failing
the whole listing.
"""

import asyncio
import json
import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..core.errors import NotFound, UpstreamFailure
from ..storage import StoredObject
from ..storage.client import RAW


logger = logging.getLogger(__name__)

CANONICAL_NAME = "data"

# Page size used when listing the objects of a single slug.
SLUG_PAGE_SIZE = 10


class RecordNotFound(NotFound):
    default_message = "not found"


class RecordFetchError(UpstreamFailure):
    default_message = "cannot fetch current data.json"


class RecordFormatError(UpstreamFailure):
    default_message = "bad data.json format"


def _key_pattern(prefix: str) -> "re.Pattern[str]":
    return re.compile(rf"^{re.escape(prefix)}/([^/]+)/data(?:\.json)?$", re.IGNORECASE)


def parse_record_key(key: str, prefix: str) -> Optional[str]:
    """Return the slug of a record key, or ``None`` if ``key`` is not one."""
    m = _key_pattern(prefix).match(key or "")
    return m.group(1) if m else None


def _prefer(current: StoredObject, incoming: StoredObject) -> bool:
    """True if ``incoming`` should replace ``current``."""
    if current.has_json_suffix != incoming.has_json_suffix:
        return current.has_json_suffix
    return incoming.version > current.version


def select_canonical(candidates: Iterable[StoredObject]) -> Optional[StoredObject]:
    """Pick the authoritative object among duplicates of one record."""
    chosen: Optional[StoredObject] = None
    for candidate in candidates:
        if chosen is None or _prefer(chosen, candidate):
            chosen = candidate
    return chosen


def group_by_slug(objects: Iterable[StoredObject], prefix: str) -> Dict[str, StoredObject]:
    """Group record objects by slug and select one per slug.

    Objects that are not record keys (images, other files) are ignored.
    """
    chosen: Dict[str, StoredObject] = {}
    for obj in objects:
        slug = parse_record_key(obj.key, prefix)
        if slug is None:
            continue
        current = chosen.get(slug)
        if current is None or _prefer(current, obj):
            chosen[slug] = obj
    return chosen


def parse_record(content: bytes) -> Dict[str, Any]:
    """Decode stored bytes into a record dictionary."""
    try:
        data = json.loads(content.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise RecordFormatError() from exc
    if not isinstance(data, dict):
        raise RecordFormatError()
    return data


class RecordResolver:
    """Locate, fetch and rewrite collage records in storage.

    Parameters
    ----------
    storage
        A storage client exposing ``list_resources``, ``versioned_url``,
        ``fetch`` and ``upload_json`` (see ``storage.client``).
    prefix
        Folder holding all posts, without trailing slash.
    page_size
        Page size for full listings.
    """

    def __init__(self, storage, prefix: str = "collages", page_size: int = 100) -> None:
        self.storage = storage
        self.prefix = prefix.strip("/")
        self.page_size = page_size

    def slug_prefix(self, slug: str) -> str:
        return f"{self.prefix}/{slug}/"

    def canonical_key(self, slug: str) -> str:
        return f"{self.prefix}/{slug}/{CANONICAL_NAME}"

    async def list_objects(self, prefix: str, page_size: int) -> List[StoredObject]:
        """Enumerate every raw object under ``prefix``, page by page."""
        objects: List[StoredObject] = []
        cursor: Optional[str] = None
        while True:
            page = await asyncio.to_thread(self.storage.list_resources, RAW, prefix, page_size, cursor)
            objects.extend(page.entries)
            cursor = page.next_cursor
            if not cursor:
                return objects

    async def locate(self, slug: str) -> StoredObject:
        """Return the authoritative stored object for ``slug``."""
        objects = await self.list_objects(self.slug_prefix(slug), SLUG_PAGE_SIZE)
        chosen = select_canonical(o for o in objects if parse_record_key(o.key, self.prefix) == slug)
        if chosen is None:
            raise RecordNotFound(f"data.json not found for slug {slug}")
        return chosen

    async def fetch(self, obj: StoredObject) -> Dict[str, Any]:
        """Download and parse ``obj`` through its version‑pinned URL."""
        url = self.storage.versioned_url(obj.key, obj.version)
        try:
            content = await asyncio.to_thread(self.storage.fetch, url)
        except UpstreamFailure as exc:
            raise RecordFetchError() from exc
        return parse_record(content)

    async def resolve(self, slug: str) -> Tuple[StoredObject, Dict[str, Any]]:
        obj = await self.locate(slug)
        return obj, await self.fetch(obj)

    async def write_back(self, slug: str, record: Dict[str, Any]) -> str:
        """Upload ``record`` to the canonical key of ``slug`` and return that key.

        The canonical key is used regardless of which duplicate the
        record was read from, so later resolutions converge on it.
        """
        key = self.canonical_key(slug)
        await asyncio.to_thread(self.storage.upload_json, key, record)
        return key

    async def _fetch_or_none(self, slug: str, obj: StoredObject) -> Optional[Tuple[str, Dict[str, Any]]]:
        try:
            return slug, await self.fetch(obj)
        except UpstreamFailure as exc:
            logger.warning("Dropping %s from listing: %s", slug, exc.message)
            return None

    async def resolve_all(self) -> List[Tuple[str, Dict[str, Any]]]:
        """Resolve every post under the prefix, best effort.

        Returns ``(slug, record)`` pairs in no particular order.  Slugs
        whose record cannot be fetched or parsed are omitted.
        """
        objects = await self.list_objects(f"{self.prefix}/", self.page_size)
        chosen = group_by_slug(objects, self.prefix)
        results = await asyncio.gather(*(self._fetch_or_none(slug, obj) for slug, obj in chosen.items()))
        return [r for r in results if r is not None]
