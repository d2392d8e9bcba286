"""
FastAPI dependency providers.

Each request builds its services from the ``Settings`` instance
returned by ``get_settings``; nothing in the service layer looks at the
environment.  Tests swap the storage client (or the settings) through
``app.dependency_overrides``.

JSON bodies are read inside the handlers with ``read_json`` and
``parse_body`` rather than declared as body parameters: FastAPI parses
declared bodies before it runs dependencies, and the admin check must
reject a request before its body is looked at.
"""

from typing import Any, Type, TypeVar

from fastapi import Depends, Request
from pydantic import BaseModel, ValidationError

from ..services.archive_service import ArchiveService
from ..services.post_service import PostService
from ..services.record_resolver import RecordResolver
from ..storage import CloudinaryStorage
from .config import Settings, get_settings
from .errors import BadRequest


Model = TypeVar("Model", bound=BaseModel)

INVALID_BODY = "Invalid JSON body"


def get_storage(settings: Settings = Depends(get_settings)) -> CloudinaryStorage:
    return CloudinaryStorage(
        cloud_name=settings.cloud_name,
        api_key=settings.api_key,
        api_secret=settings.api_secret,
        timeout=settings.http_timeout,
    )


def get_resolver(
    settings: Settings = Depends(get_settings),
    storage=Depends(get_storage),
) -> RecordResolver:
    return RecordResolver(storage, prefix=settings.storage_prefix, page_size=settings.list_page_size)


def get_post_service(
    resolver: RecordResolver = Depends(get_resolver),
    storage=Depends(get_storage),
) -> PostService:
    return PostService(resolver, storage)


def get_archive_service(
    resolver: RecordResolver = Depends(get_resolver),
    storage=Depends(get_storage),
) -> ArchiveService:
    return ArchiveService(resolver, storage)


async def read_json(request: Request) -> Any:
    """Return the decoded JSON body, or ``None`` if it is empty or malformed."""
    try:
        return await request.json()
    except ValueError:
        return None


async def parse_body(request: Request, model: Type[Model]) -> Model:
    """Validate the JSON body against ``model``; 400 ``Invalid JSON body`` otherwise."""
    data = await read_json(request)
    if not isinstance(data, dict):
        raise BadRequest(INVALID_BODY)
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise BadRequest(INVALID_BODY) from exc
