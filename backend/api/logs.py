"""
Hi-Pot Test Log - Test Log API Endpoints
Version: 1.2.1

Changelog:
v1.2.1 (2026-10-19): Certificate download filename safe for non-ASCII identifiers
v1.2.0 (2026-10-12): Submission rows written in one transaction
v1.1.0 (2026-10-07): GET /logs/{id}/pdf returns the decoded certificate
v1.0.0 (2026-10-01): Initial submit / list / delete endpoints
"""

from fastapi import APIRouter, Depends, Request
from typing import Optional
import logging

from api.deps import (
    bearer_token, get_audit_store, get_query_service, get_validator, require_principal,
)
from api.responses import pdf_response
from models.audit import SavedEntry
from models.auth import Principal
from services.audit_store import AuditStore
from services.certificate_renderer import decode_data_url
from services.errors import StorageError, StorageErrorCode, ValidationError, ValidationErrorCode
from services.ingestion import IngestionValidator, ingest_submission
from services.query_service import QueryService

router = APIRouter(prefix="/logs", tags=["logs"])
logger = logging.getLogger(__name__)


@router.post("")
async def save_work_order(
    request: Request,
    principal: Principal = Depends(require_principal),
    validator: IngestionValidator = Depends(get_validator),
    store: AuditStore = Depends(get_audit_store),
):
    """
    Save a work order: one log row per serial entry, all sharing the
    rendered certificate. Nothing is written unless every row is.
    """
    try:
        payload = await request.json()
    except ValueError:
        raise ValidationError(ValidationErrorCode.INVALID_FIELD, "Request body must be JSON")

    records = await ingest_submission(payload, validator, store)
    logger.info(f"{principal.username} saved {len(records)} log(s) for "
                f"WO {records[0].work_order_number}")

    return {
        "success": True,
        "savedCount": len(records),
        "results": [
            SavedEntry(id=r.id, serial_number=r.serial_number, created_at=r.created_at)
            for r in records
        ],
    }


@router.get("")
async def list_logs(
    token: Optional[str] = Depends(bearer_token),
    query: QueryService = Depends(get_query_service),
):
    """All logs, newest first; filtering is left to the client"""
    records = await query.list_records(token)
    return {"success": True, "logs": records}


@router.get("/{log_id}/pdf")
async def download_certificate(
    log_id: int,
    token: Optional[str] = Depends(bearer_token),
    query: QueryService = Depends(get_query_service),
):
    """Certificate of one log as a PDF file"""
    record = await query.get_record(token, log_id)
    try:
        pdf_bytes = decode_data_url(record.pdf_data)
    except ValueError as e:
        logger.error(f"Stored certificate for log {log_id} is unreadable: {e}")
        raise StorageError(StorageErrorCode.NOT_FOUND, "Certificate data unreadable")

    return pdf_response(pdf_bytes, f"hipot_{record.work_order_number}_{record.serial_number}.pdf")


@router.delete("/{log_id}")
async def delete_log(
    log_id: int,
    token: Optional[str] = Depends(bearer_token),
    query: QueryService = Depends(get_query_service),
):
    """Delete a single log row"""
    await query.delete_record(token, log_id)
    return {"success": True}
