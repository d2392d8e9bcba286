"""Cloudinary storage client.

This module wraps the handful of Cloudinary Admin/Upload API calls the
service needs, plus plain HTTP fetches of delivered files:

* :meth:`CloudinaryStorage.list_resources` – one page of a prefix listing.
* :meth:`CloudinaryStorage.versioned_url` – delivery URL pinned to a version.
* :meth:`CloudinaryStorage.fetch` – download bytes from a URL.
* :meth:`CloudinaryStorage.upload_json` – write a JSON document as a raw file.
* :meth:`CloudinaryStorage.delete_by_prefix` / :meth:`delete_folder`.

Credentials are passed on every SDK call instead of through the global
``cloudinary.config()``, so each client instance is self‑contained.
All methods are blocking; async callers run them with
``asyncio.to_thread``.  Any SDK or HTTP failure is raised as
:class:`StorageError`.
"""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import cloudinary.api
import cloudinary.exceptions
import cloudinary.uploader
import requests

from ..core.errors import UpstreamFailure


logger = logging.getLogger(__name__)

RAW = "raw"
IMAGE = "image"

DELIVERY_BASE = "https://res.cloudinary.com"


class StorageError(UpstreamFailure):
    """A storage or CDN call failed."""


@dataclass(frozen=True)
class StoredObject:
    """A stored object descriptor as reported by a listing.

    Attributes:
        key: The object's public id, e.g. ``collages/case-1/data``.
        version: Version number assigned by the storage on each write.
    """

    key: str
    version: int

    @property
    def has_json_suffix(self) -> bool:
        return self.key.lower().endswith(".json")


@dataclass
class StoragePage:
    entries: List[StoredObject] = field(default_factory=list)
    next_cursor: Optional[str] = None


class CloudinaryStorage:
    """Client for the Cloudinary account holding the collages."""

    def __init__(
        self,
        *,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        timeout: float = 15,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.cloud_name = cloud_name
        self.timeout = timeout
        self.session = session or requests.Session()
        self._credentials = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
        }

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def list_resources(
        self,
        resource_type: str,
        prefix: str,
        max_results: int,
        next_cursor: Optional[str] = None,
    ) -> StoragePage:
        """Return one page of uploaded resources whose key starts with ``prefix``."""
        options: Dict[str, Any] = {
            "resource_type": resource_type,
            "type": "upload",
            "prefix": prefix,
            "max_results": max_results,
        }
        if next_cursor:
            options["next_cursor"] = next_cursor
        try:
            logger.debug("Listing %s resources under %s", resource_type, prefix)
            result = cloudinary.api.resources(**options, **self._credentials)
        except cloudinary.exceptions.Error as exc:
            logger.error("Listing %s failed: %s", prefix, exc)
            raise StorageError(str(exc) or "Storage listing failed") from exc

        entries = []
        for r in result.get("resources") or []:
            public_id = r.get("public_id") or ""
            if not public_id:
                continue
            entries.append(StoredObject(key=public_id, version=int(r.get("version") or 0)))
        return StoragePage(entries=entries, next_cursor=result.get("next_cursor") or None)

    def versioned_url(self, key: str, version: int) -> str:
        """Delivery URL of a raw JSON object pinned to ``version``.

        Pinning the version defeats stale edge caches.  Keys stored
        without an extension are delivered with ``.json`` appended.
        """
        name = key if key.lower().endswith(".json") else f"{key}.json"
        return f"{DELIVERY_BASE}/{self.cloud_name}/raw/upload/v{version}/{quote(name, safe='')}"

    def fetch(self, url: str) -> bytes:
        """GET ``url`` and return the body."""
        try:
            logger.debug("Fetching %s", url)
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.content
        except requests.RequestException as exc:
            logger.warning("Fetch of %s failed: %s", url, exc)
            raise StorageError(f"cannot fetch {url}") from exc

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def upload_json(self, key: str, payload: Dict[str, Any]) -> None:
        """Upload ``payload`` as a raw JSON file at ``key``, overwriting it."""
        encoded = base64.b64encode(json.dumps(payload, ensure_ascii=False).encode("utf-8")).decode("ascii")
        try:
            cloudinary.uploader.upload(
                f"data:application/json;base64,{encoded}",
                resource_type=RAW,
                public_id=key,
                overwrite=True,
                format="json",
                **self._credentials,
            )
        except cloudinary.exceptions.Error as exc:
            logger.error("Upload of %s failed: %s", key, exc)
            raise StorageError(str(exc) or "Storage upload failed") from exc

    def delete_by_prefix(self, prefix: str, resource_type: str) -> None:
        try:
            cloudinary.api.delete_resources_by_prefix(
                prefix, resource_type=resource_type, type="upload", **self._credentials
            )
        except cloudinary.exceptions.Error as exc:
            logger.error("Deleting %s resources under %s failed: %s", resource_type, prefix, exc)
            raise StorageError(str(exc) or "Storage delete failed") from exc

    def delete_folder(self, prefix: str) -> None:
        try:
            cloudinary.api.delete_folder(prefix, **self._credentials)
        except cloudinary.exceptions.Error as exc:
            logger.error("Deleting folder %s failed: %s", prefix, exc)
            raise StorageError(str(exc) or "Storage delete failed") from exc
