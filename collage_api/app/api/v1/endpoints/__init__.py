"""
Endpoint subpackage for API v1.

Each module defines an APIRouter for one concern (posts, archive
export, admin login, service info).  The routers are aggregated in
``router.py``.
"""
