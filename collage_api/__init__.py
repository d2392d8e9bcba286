"""
Top‑level package for the Collage API.

The package provides no public exports; all functionality lives in
submodules under ``app``.  Import the ASGI application as
``collage_api.app.main:app``.
"""

__all__ = []
