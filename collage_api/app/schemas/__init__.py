"""
Pydantic schema definitions for API payloads.

Request bodies are validated here only for shape (types); required
fields such as ``slug`` and ``items`` are checked by the services so
that their absence produces the same ``{"error": ...}`` messages as
every other bad request.
"""
