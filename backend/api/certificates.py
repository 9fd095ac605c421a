"""
Hi-Pot Test Log - Certificate Rendering API
Version: 1.0.1

Changelog:
v1.0.1 (2026-10-19): Filename safe for non-ASCII work order numbers
v1.0.0 (2026-10-03): Render a work order to PDF ahead of submission

Rendering and storage are separate steps: the client renders here, then
posts the returned data URL to /logs as pdfData.
"""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.concurrency import run_in_threadpool
import logging

from api.deps import get_validator, require_principal
from api.responses import pdf_response
from models.auth import Principal
from services.certificate_renderer import render_certificate, to_data_url
from services.errors import ValidationError, ValidationErrorCode
from services.ingestion import IngestionValidator

router = APIRouter(prefix="/certificates", tags=["certificates"])
logger = logging.getLogger(__name__)


@router.post("")
async def render(
    request: Request,
    output: str = Query("pdf", alias="format", pattern="^(pdf|data-url)$"),
    principal: Principal = Depends(require_principal),
    validator: IngestionValidator = Depends(get_validator),
):
    """
    Render the certificate for a work order.
    - format=pdf: raw application/pdf bytes
    - format=data-url: {"pdfData": "data:application/pdf;base64,..."}
    """
    try:
        payload = await request.json()
    except ValueError:
        raise ValidationError(ValidationErrorCode.INVALID_FIELD, "Request body must be JSON")

    work_order = validator.validate_work_order(payload)
    pdf_bytes = await run_in_threadpool(render_certificate, work_order)

    if output == "data-url":
        return {"success": True, "pdfData": to_data_url(pdf_bytes)}

    return pdf_response(pdf_bytes, f"hipot_{work_order.work_order_number}.pdf")
