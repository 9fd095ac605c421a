"""
Hi-Pot Test Log - Diagnostics API
Version: 1.0.0

Changelog:
v1.0.0 (2026-10-07): Database diagnostics without certificate payloads
"""

from fastapi import APIRouter, Depends

from api.deps import get_audit_store, require_principal
from models.auth import Principal
from services.audit_store import AuditStore

router = APIRouter(prefix="/debug", tags=["debug"])


@router.get("/logs")
async def debug_logs(
    principal: Principal = Depends(require_principal),
    store: AuditStore = Depends(get_audit_store),
):
    """Database path, pdf_logs schema and record metadata (no pdf_data)"""
    info = await store.describe()
    return {"success": True, **info}
