"""
Security helpers: admin tokens, bearer extraction and password checks.

This module implements a lightweight JSON Web Token (JWT) mechanism
using HMAC‑SHA256 signatures and base64url encoding.  Tokens carry a
single ``role`` claim (always ``"admin"``) and an expiration timestamp
(``exp``, seconds since the epoch).  Issuer and verifier share one
secret, and verification is stateless: nothing is stored server‑side
and expiry is the only way a token stops working.

The ``TokenService`` is parameterized by the secret and a clock so
that expiry can be tested deterministically.  The FastAPI dependencies
at the bottom of the module build one from the application settings.
"""

import base64
import hashlib
import hmac
import json
import logging
import re
import time
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, Header

from .config import Settings, get_settings
from .errors import Unauthorized


logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
ALGORITHM = "HS256"

Clock = Callable[[], float]

_BEARER_RE = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)


def _b64_url_encode(data: bytes) -> str:
    """Base64‑url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64‑url encoded string, adding padding if necessary."""
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _b64_url_json(data: Dict[str, Any]) -> str:
    return _b64_url_encode(json.dumps(data, separators=(",", ":")).encode("utf-8"))


def _sign(signing_input: str, secret: str) -> str:
    """HMAC‑SHA256 of ``signing_input``, base64url encoded."""
    digest = hmac.new(secret.encode("utf-8"), signing_input.encode("utf-8"), hashlib.sha256).digest()
    return _b64_url_encode(digest)


def issue_token(secret: str, ttl_seconds: int, clock: Clock = time.time) -> str:
    """Create a signed admin token valid for ``ttl_seconds``.

    The token is a string of the form ``header.payload.signature``,
    where each part is base64url encoded without padding.  A negative
    ``ttl_seconds`` produces a token that is already expired.
    """
    header = {"alg": ALGORITHM, "typ": "JWT"}
    payload = {"role": ADMIN_ROLE, "exp": int(clock()) + int(ttl_seconds)}
    signing_input = f"{_b64_url_json(header)}.{_b64_url_json(payload)}"
    return f"{signing_input}.{_sign(signing_input, secret)}"


def verify_token(token: str, secret: str, clock: Clock = time.time) -> Optional[Dict[str, Any]]:
    """Verify and decode an admin token.

    Returns the payload dictionary if the token is well formed, signed
    with ``secret``, not expired and carries the admin role; otherwise
    returns ``None``.  This function never raises.
    """
    if not token or not secret:
        return None
    try:
        parts = token.split(".")
        if len(parts) != 3 or not all(parts):
            return None
        header_b64, payload_b64, signature_b64 = parts

        header = json.loads(_b64_url_decode(header_b64).decode("utf-8"))
        if not isinstance(header, dict) or header.get("alg") != ALGORITHM:
            return None

        expected = _sign(f"{header_b64}.{payload_b64}", secret)
        if not hmac.compare_digest(expected, signature_b64):
            return None

        payload = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
        if not isinstance(payload, dict):
            return None
        exp = payload.get("exp")
        if exp is not None and clock() * 1000 >= float(exp) * 1000:
            return None
        if payload.get("role") != ADMIN_ROLE:
            return None
        return payload
    except Exception:
        return None


class TokenService:
    """Issue and verify admin tokens with one shared secret."""

    def __init__(self, secret: str, ttl_seconds: int, clock: Clock = time.time) -> None:
        self.secret = secret
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    def issue(self, ttl_seconds: Optional[int] = None) -> str:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        return issue_token(self.secret, ttl, self.clock)

    def verify(self, token: str) -> Optional[Dict[str, Any]]:
        return verify_token(token, self.secret, self.clock)

    def authorize(self, authorization: Optional[str]) -> Optional[Dict[str, Any]]:
        """Return the claims carried by an ``Authorization`` header, if valid."""
        token = extract_bearer_token(authorization)
        if token is None:
            return None
        return self.verify(token)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the credential of a ``Bearer <token>`` header (case‑insensitive)."""
    if not authorization:
        return None
    m = _BEARER_RE.match(authorization.strip())
    if not m:
        return None
    return m.group(1).strip() or None


def check_admin_password(candidate: Any, expected: str) -> bool:
    """Compare a login password against the configured one.

    Always false when either side is empty, so an unconfigured
    deployment cannot be logged into.  A candidate that is not a
    string never matches.
    """
    if not isinstance(candidate, str) or not candidate or not expected:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


# ---------------------------------------------------------------------------
# FastAPI dependencies
# ---------------------------------------------------------------------------

def get_token_service(settings: Settings = Depends(get_settings)) -> TokenService:
    return TokenService(settings.jwt_secret, settings.token_ttl_seconds)


def require_admin(
    authorization: Optional[str] = Header(None),
    tokens: TokenService = Depends(get_token_service),
) -> Dict[str, Any]:
    """Dependency that rejects the request unless it carries a valid admin token."""
    claims = tokens.authorize(authorization)
    if claims is None:
        logger.info("Rejected request with missing or invalid admin token")
        raise Unauthorized("Unauthorized")
    return claims


def is_admin_request(
    authorization: Optional[str] = Header(None),
    tokens: TokenService = Depends(get_token_service),
) -> bool:
    """Dependency reporting whether the request is authorized; never raises."""
    return tokens.authorize(authorization) is not None
