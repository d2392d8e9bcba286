"""
Version 1 of the API.

Mounted under ``/api/v1`` by ``main.create_app``.
"""
