"""
Hi-Pot Test Log - Request Dependencies
Version: 1.0.0

Changelog:
v1.0.0 (2026-10-01): Store handles from app.state, bearer token extraction

Store and service handles are built once in main.create_app() and read from
app.state per request; routes never open a global connection.
"""

from fastapi import Depends, Header, Request
from typing import Optional

from models.auth import Principal
from services.audit_store import AuditStore
from services.auth_gate import AuthGate
from services.ingestion import IngestionValidator
from services.query_service import QueryService


def get_audit_store(request: Request) -> AuditStore:
    return request.app.state.audit_store


def get_auth_gate(request: Request) -> AuthGate:
    return request.app.state.auth_gate


def get_query_service(request: Request) -> QueryService:
    return request.app.state.query_service


def get_validator(request: Request) -> IngestionValidator:
    return request.app.state.validator


def bearer_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """Token from an "Authorization: Bearer <token>" header, or None"""
    if not authorization:
        return None
    scheme, _, credentials = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return credentials.strip()


def require_principal(
    token: Optional[str] = Depends(bearer_token),
    auth_gate: AuthGate = Depends(get_auth_gate),
) -> Principal:
    """Reject the request with an AuthError unless it carries a valid token"""
    return auth_gate.validate_token(token)
