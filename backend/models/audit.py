"""
Hi-Pot Test Log - Audit Record Models
Version: 1.0.0

Changelog:
v1.0.0 (2026-10-01): Initial pdf_logs record models
"""

from pydantic import BaseModel, Field


class AuditRecordSummary(BaseModel):
    """pdf_logs row without the certificate payload"""
    id: int = Field(..., description="Record ID (auto-generated)")
    work_order_number: str
    operator: str
    test_date: str = Field(..., description="ISO calendar date of the test")
    serial_number: str
    created_at: str = Field(..., description="ISO timestamp assigned on insert")


class AuditRecord(AuditRecordSummary):
    """One tested unit, as persisted in pdf_logs"""
    pdf_data: str = Field(..., description="Certificate as data:application/pdf;base64 URL")


class SavedEntry(BaseModel):
    id: int
    serial_number: str
    created_at: str
