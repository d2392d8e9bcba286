"""Pydantic models for the admin login endpoint."""

from typing import Any

from pydantic import BaseModel


class LoginRequest(BaseModel):
    # Anything but a non-empty string is treated as a wrong password.
    password: Any = None


class TokenResponse(BaseModel):
    token: str
