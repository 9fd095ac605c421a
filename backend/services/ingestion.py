"""
Hi-Pot Test Log - Work Order Ingestion
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Serial entry cap; InvalidField for malformed values;
                      bare base64 certificates normalised to data URLs
v1.0.0 (2026-10-01): Initial submission validation and fan-out

Validation is all-or-nothing and finishes before anything is written.
Serial numbers are not required to be unique within a submission.
"""

import logging
from typing import Any, List

from pydantic import ValidationError as PydanticValidationError

from config import settings
from models.audit import AuditRecord
from models.work_order import WorkOrder, WorkOrderSubmission
from services.audit_store import AuditStore
from services.certificate_renderer import decode_data_url, to_data_url
from services.errors import ValidationError, ValidationErrorCode

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("workOrderNumber", "operator", "testDate")
PDF_MAGIC = b"%PDF"


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def normalize_pdf_data(value: Any) -> str:
    """Check the attached certificate and return it as a PDF data URL"""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(ValidationErrorCode.BAD_PDF_DATA, "Missing PDF data", field="pdfData")
    value = value.strip()
    try:
        pdf_bytes = decode_data_url(value)
    except ValueError as e:
        raise ValidationError(ValidationErrorCode.BAD_PDF_DATA, str(e), field="pdfData")
    if not pdf_bytes.startswith(PDF_MAGIC):
        raise ValidationError(ValidationErrorCode.BAD_PDF_DATA,
                              "Certificate payload is not a PDF document", field="pdfData")
    # Data URLs are stored exactly as submitted
    return value if value.startswith("data:") else to_data_url(pdf_bytes)


class IngestionValidator:
    """Turns a loosely-typed request body into a validated work order"""

    def __init__(self, max_serial_entries: int = None):
        self.max_serial_entries = max_serial_entries or settings.MAX_SERIAL_ENTRIES

    def validate(self, payload: Any) -> WorkOrderSubmission:
        """Validate a work order submission including its certificate"""
        fields = self._check_structure(payload)
        fields["pdfData"] = normalize_pdf_data(payload.get("pdfData"))
        return self._build(WorkOrderSubmission, fields)

    def validate_work_order(self, payload: Any) -> WorkOrder:
        """Validate a work order for rendering; no certificate expected"""
        return self._build(WorkOrder, self._check_structure(payload))

    def _check_structure(self, payload: Any) -> dict:
        if not isinstance(payload, dict):
            raise ValidationError(ValidationErrorCode.INVALID_FIELD,
                                  "Request body must be a JSON object")

        for name in REQUIRED_FIELDS:
            if _is_blank(payload.get(name)):
                raise ValidationError(ValidationErrorCode.MISSING_FIELD,
                                      f"Missing required field: {name}", field=name)

        entries = payload.get("serialEntries")
        if not isinstance(entries, list) or not entries:
            raise ValidationError(ValidationErrorCode.EMPTY_LIST,
                                  "serialEntries must be a non-empty list",
                                  field="serialEntries")

        kept: List[dict] = []
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                raise ValidationError(ValidationErrorCode.INVALID_FIELD,
                                      f"serialEntries[{index}] must be an object",
                                      field="serialEntries")
            serial = entry.get("serialNumber")
            if serial is None or not str(serial).strip():
                continue  # blank row left on the entry form
            kept.append(entry)

        if not kept:
            raise ValidationError(ValidationErrorCode.EMPTY_LIST,
                                  "No serial entry has a serial number",
                                  field="serialEntries")
        if len(kept) > self.max_serial_entries:
            raise ValidationError(ValidationErrorCode.INVALID_FIELD,
                                  f"At most {self.max_serial_entries} serial entries "
                                  f"per work order, got {len(kept)}",
                                  field="serialEntries")

        return {**payload, "serialEntries": kept}

    @staticmethod
    def _build(model, fields: dict):
        try:
            return model.model_validate(fields)
        except PydanticValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            raise ValidationError(ValidationErrorCode.INVALID_FIELD,
                                  f"Invalid value for {location}: {first['msg']}",
                                  field=location)


async def ingest_submission(payload: Any, validator: IngestionValidator,
                            store: AuditStore) -> List[AuditRecord]:
    """Validate a submission, then persist one row per serial entry"""
    submission = validator.validate(payload)
    logger.info(f"Received work order save request: wo={submission.work_order_number} "
                f"operator={submission.operator} serials={len(submission.serial_entries)} "
                f"pdf_chars={len(submission.pdf_data)}")
    return await store.insert_submission(submission)
