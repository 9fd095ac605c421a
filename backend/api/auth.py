"""
Hi-Pot Test Log - Authentication API
Version: 1.0.1

Changelog:
v1.0.1 (2026-10-19): Malformed login bodies rejected as bad credentials (401)
                      instead of a 422 validation body
v1.0.0 (2026-10-01): Initial login endpoint
"""

from fastapi import APIRouter, Depends, Request
import logging

from api.deps import get_auth_gate
from models.auth import LoginRequest, TokenResponse
from services.auth_gate import AuthGate
from services.errors import AuthError, AuthErrorCode

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post(
    "/login",
    response_model=TokenResponse,
    openapi_extra={"requestBody": {"content": {"application/json": {
        "schema": LoginRequest.model_json_schema()}}}},
)
async def login(request: Request, auth_gate: AuthGate = Depends(get_auth_gate)):
    """Exchange username/password for a 24h bearer token"""
    try:
        # Invalid JSON and wrong field types both raise ValueError subclasses
        data = LoginRequest.model_validate(await request.json())
    except ValueError:
        logger.warning("Login rejected: malformed request body")
        raise AuthError(AuthErrorCode.INVALID_CREDENTIALS, "Invalid credentials")

    token = await auth_gate.issue_token(data.username, data.password)
    return TokenResponse(token=token)
