import json
from typing import Dict, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from collage_api.app.core.config import Settings, get_settings
from collage_api.app.core.deps import get_storage
from collage_api.app.core.security import issue_token
from collage_api.app.storage import StorageError, StoragePage, StoredObject


ADMIN_PASSWORD = "hunter2"
JWT_SECRET = "test-secret"


class FakeStorage:
    """In-memory stand-in for CloudinaryStorage.

    Raw objects keep only their latest version, like the real service,
    and ``fetch`` only serves a record when the URL names that exact
    version.  Image bytes served to the archive export live in ``blobs``.
    """

    def __init__(self) -> None:
        self.raw: Dict[str, Tuple[int, bytes]] = {}
        self.images: Dict[str, bytes] = {}
        self.blobs: Dict[str, bytes] = {}
        self.deleted: List[Tuple[str, str]] = []
        self.deleted_folders: List[str] = []
        self.list_calls: List[Tuple[str, str, int, Optional[str]]] = []
        self._version = 1000

    # helpers for tests -------------------------------------------------
    def put_raw(self, key: str, payload, version: Optional[int] = None) -> int:
        if version is None:
            self._version += 1
            version = self._version
        content = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
        self.raw[key] = (version, content)
        return version

    def record(self, key: str) -> dict:
        return json.loads(self.raw[key][1].decode("utf-8"))

    # storage interface -------------------------------------------------
    def list_resources(self, resource_type, prefix, max_results, next_cursor=None) -> StoragePage:
        self.list_calls.append((resource_type, prefix, max_results, next_cursor))
        source = self.raw if resource_type == "raw" else self.images
        keys = sorted(k for k in source if k.startswith(prefix))
        offset = int(next_cursor or 0)
        page = keys[offset:offset + max_results]
        entries = []
        for key in page:
            version = self.raw[key][0] if resource_type == "raw" else 1
            entries.append(StoredObject(key=key, version=version))
        more = offset + max_results < len(keys)
        return StoragePage(entries=entries, next_cursor=str(offset + max_results) if more else None)

    def versioned_url(self, key: str, version: int) -> str:
        return f"fake://{key}@{version}"

    def fetch(self, url: str) -> bytes:
        if url.startswith("fake://"):
            key, _, version = url[len("fake://"):].rpartition("@")
            stored = self.raw.get(key)
            if stored is None or str(stored[0]) != version:
                raise StorageError(f"cannot fetch {url}")
            return stored[1]
        if url not in self.blobs:
            raise StorageError(f"cannot fetch {url}")
        return self.blobs[url]

    def upload_json(self, key: str, payload) -> None:
        self.put_raw(key, payload)

    def delete_by_prefix(self, prefix: str, resource_type: str) -> None:
        self.deleted.append((prefix, resource_type))
        source = self.raw if resource_type == "raw" else self.images
        for key in [k for k in source if k.startswith(prefix)]:
            del source[key]

    def delete_folder(self, prefix: str) -> None:
        self.deleted_folders.append(prefix)


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        admin_password=ADMIN_PASSWORD,
        jwt_secret=JWT_SECRET,
        token_ttl_seconds=3600,
        cloud_name="demo",
        api_key="key",
        api_secret="secret",
        storage_prefix="collages",
        list_page_size=2,
    )


@pytest.fixture
def client(settings: Settings, storage: FakeStorage) -> TestClient:
    from collage_api.app.main import create_app

    app = create_app(settings)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_storage] = lambda: storage
    return TestClient(app)


@pytest.fixture
def admin_headers() -> dict:
    return {"Authorization": f"Bearer {issue_token(JWT_SECRET, 3600)}"}
