"""
ZIP export of a collage post.

The archive holds a ``README.txt`` summary followed by one file per
image, named ``<2-digit index>[_<caption>].<ext>``.  Images whose
download fails are skipped without consuming an index, so the archive
is always produced as long as the record itself resolves.
"""

import asyncio
import io
import logging
import re
import zipfile
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional
from urllib.parse import quote

from ..core.errors import BadRequest, UpstreamFailure
from .post_service import clean_slug
from .record_resolver import RecordResolver


logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 80
MAX_CAPTION_LENGTH = 40

_WHITESPACE_RE = re.compile(r"\s+")
# Letters and digits of any script, plus space, underscore and hyphen.
_UNSAFE_RE = re.compile(r"[^\w \-]+")
_SPACES_RE = re.compile(r" +")
_EXT_RE = re.compile(r"\.(jpg|jpeg|png|webp)(\?.*)?$", re.IGNORECASE)
_DATE_PREFIX_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_NON_PRINTABLE_ASCII_RE = re.compile(r'[^ -~]+|["\\]')


@dataclass(frozen=True)
class ExportedArchive:
    filename: str
    content: bytes
    content_disposition: str
    entries: int


def safe_name(value: Any, limit: int = MAX_NAME_LENGTH) -> str:
    """Sanitize free text for use in a file name.

    >>> safe_name("Café  Night!!")
    'Café_Night'
    """
    text = _WHITESPACE_RE.sub(" ", str(value or "").strip())
    text = _UNSAFE_RE.sub("", text)
    return _SPACES_RE.sub("_", text)[:limit]


def yyyymmdd(value: Any) -> str:
    """Format an ISO date or date‑time as ``YYYYMMDD``; ``""`` if unparseable."""
    if not value or not isinstance(value, str):
        return ""
    text = value.strip()
    m = _DATE_PREFIX_RE.match(text)
    if not m:
        return ""
    try:
        parsed = datetime(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        return ""
    return parsed.strftime("%Y%m%d")


def archive_basename(record: Dict[str, Any], slug: str) -> str:
    parts = [safe_name(record.get("title")), yyyymmdd(record.get("date")), slug]
    return "-".join(p for p in parts if p) or slug


def image_extension(url: str) -> str:
    m = _EXT_RE.search(url or "")
    return m.group(1).lower() if m else "jpg"


def entry_name(index: int, url: str, caption: Optional[str]) -> str:
    safe_caption = safe_name(caption)[:MAX_CAPTION_LENGTH]
    suffix = f"_{safe_caption}" if safe_caption else ""
    return f"{index:02d}{suffix}.{image_extension(url)}"


def readme_text(record: Dict[str, Any], slug: str, count: int) -> str:
    return (
        f"Title: {record.get('title') or ''}\n"
        f"Date: {record.get('date') or ''}\n"
        f"Slug: {slug}\n"
        f"Count: {count}\n"
    )


def content_disposition(basename: str) -> str:
    """``attachment`` header with an ASCII fallback and a UTF‑8 file name."""
    ascii_fallback = _NON_PRINTABLE_ASCII_RE.sub("_", basename) + ".zip"
    utf8_encoded = quote(f"{basename}.zip", safe="!~*'()")
    return f"attachment; filename=\"{ascii_fallback}\"; filename*=UTF-8''{utf8_encoded}"


class ArchiveService:
    """Build downloadable ZIP archives of posts."""

    def __init__(self, resolver: RecordResolver, storage) -> None:
        self.resolver = resolver
        self.storage = storage

    async def _download(self, url: str) -> Optional[bytes]:
        try:
            return await asyncio.to_thread(self.storage.fetch, url)
        except UpstreamFailure as exc:
            logger.warning("Skipping archive item %s: %s", url, exc.message)
            return None

    async def export_archive(self, slug: Optional[str]) -> ExportedArchive:
        slug = clean_slug(slug)
        _, record = await self.resolver.resolve(slug)
        items = record.get("items") if isinstance(record.get("items"), list) else []
        if not items:
            raise BadRequest("no items")

        buf = io.BytesIO()
        written = 0
        with zipfile.ZipFile(buf, mode="w", compression=zipfile.ZIP_DEFLATED, compresslevel=6) as zf:
            zf.writestr("README.txt", readme_text(record, slug, len(items)))
            index = 1
            for item in items:
                if not isinstance(item, dict):
                    continue
                url = item.get("url")
                if not url:
                    continue
                data = await self._download(url)
                if data is None:
                    continue
                zf.writestr(entry_name(index, url, item.get("caption")), data)
                index += 1
                written += 1

        basename = archive_basename(record, slug)
        logger.info("Exported %s with %d of %d images", slug, written, len(items))
        return ExportedArchive(
            filename=f"{basename}.zip",
            content=buf.getvalue(),
            content_disposition=content_disposition(basename),
            entries=written,
        )
