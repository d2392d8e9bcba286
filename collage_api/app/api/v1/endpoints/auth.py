"""
Admin login endpoint.

Exchanges the shared admin password for a signed bearer token.  The
token is not stored anywhere; it stays valid until its ``exp`` claim
passes.  The body is read leniently: a missing or malformed body is the
same as an empty password, so every failure is a 401.
"""

import logging

from fastapi import APIRouter, Depends, Request

from collage_api.app.core.config import Settings, get_settings
from collage_api.app.core.deps import read_json
from collage_api.app.core.errors import Unauthorized
from collage_api.app.core.security import TokenService, check_admin_password, get_token_service
from collage_api.app.schemas.auth import LoginRequest, TokenResponse


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/admin-login", response_model=TokenResponse)
async def admin_login(
    request: Request,
    settings: Settings = Depends(get_settings),
    tokens: TokenService = Depends(get_token_service),
) -> TokenResponse:
    data = await read_json(request)
    payload = LoginRequest(password=data.get("password") if isinstance(data, dict) else None)
    if not check_admin_password(payload.password, settings.admin_password):
        logger.info("Rejected admin login")
        raise Unauthorized("Unauthorized")
    if not settings.jwt_secret:
        logger.error("Admin login attempted but ADMIN_JWT_SECRET is not set")
        raise Unauthorized("Unauthorized")
    logger.info("Issued admin token")
    return TokenResponse(token=tokens.issue())
