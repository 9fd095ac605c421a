"""
Hi-Pot Test Log - Authentication Models
Version: 1.0.0

Changelog:
v1.0.0 (2026-10-01): Initial login / token models
"""

from pydantic import BaseModel
from datetime import datetime


class LoginRequest(BaseModel):
    # Blank defaults so a missing field fails as bad credentials, not a 422
    username: str = ""
    password: str = ""


class TokenResponse(BaseModel):
    token: str


class Principal(BaseModel):
    """Identity carried by a validated bearer token"""
    user_id: int
    username: str
    issued_at: datetime
    expires_at: datetime
