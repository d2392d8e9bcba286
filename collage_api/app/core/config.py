"""
Configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields, but the
admin password, token secret and storage credentials must be set in
any real deployment.

Business logic never reads the environment itself: services receive a
``Settings`` instance (see ``core.deps``), which also lets tests build
their own instance with explicit values.
"""

import os
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Collage API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE") or None

    # Password accepted by the login endpoint.  An empty value disables
    # login entirely.
    admin_password: str = os.getenv("ADMIN_PASSWORD", "")

    # Shared HMAC secret for admin tokens.  Tokens never verify while
    # this is empty.
    jwt_secret: str = os.getenv("ADMIN_JWT_SECRET", "")
    token_ttl_seconds: int = int(os.getenv("ADMIN_TOKEN_TTL_SECONDS", str(12 * 60 * 60)))

    # Cloudinary credentials.  ``cloud_name`` is also used to build the
    # versioned delivery URLs of stored records.
    cloud_name: str = os.getenv("CLD_CLOUD_NAME", "")
    api_key: str = os.getenv("CLD_API_KEY", "")
    api_secret: str = os.getenv("CLD_API_SECRET", "")

    # Folder under which every post lives, e.g. ``collages/<slug>/data``.
    storage_prefix: str = os.getenv("STORAGE_PREFIX", "collages")
    list_page_size: int = int(os.getenv("LIST_PAGE_SIZE", "100"))
    http_timeout: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))

    # Comma‑separated list of allowed CORS origins.
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def storage_configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# should be set before importing this module.
settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the process‑wide settings.

    Tests replace it through ``app.dependency_overrides``.
    """
    return settings
