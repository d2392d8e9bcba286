"""
Application package initializer.

The Collage API keeps no database and no in‑process state: post
metadata and images live in the object storage/CDN service.  Request
handlers in ``api/v1/endpoints`` stay thin and delegate to the
services, which in turn rely on two shared components in ``core`` and
``services``:

* the token service (``core.security``), which issues and verifies
  admin bearer tokens;
* the record resolver (``services.record_resolver``), which maps a
  slug to the single authoritative stored record.
"""

from .main import app  # noqa: F401
