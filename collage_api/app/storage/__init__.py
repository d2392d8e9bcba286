"""Object storage/CDN client used for every durable read and write."""

from .client import CloudinaryStorage, StorageError, StoragePage, StoredObject  # noqa: F401
