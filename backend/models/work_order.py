"""
Hi-Pot Test Log - Work Order Models
Version: 1.2.0

Changelog:
v1.2.0 (2026-10-19): Length limit on identifier and free-text fields
v1.1.0 (2026-10-12): Outcomes default to Pass, matching the entry form defaults
v1.0.0 (2026-10-01): Initial work order / serial entry models

Request-scoped only: a work order is never stored whole, it is fanned out
into one pdf_logs row per serial entry.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List
from datetime import date
from enum import Enum

# Longest accepted identifier or free-text value (characters)
MAX_TEXT_LENGTH = 100


class TestOutcome(str, Enum):
    """Outcome of a single electrical safety test"""
    PASS = "P"
    FAIL = "F"
    NOT_APPLICABLE = "NA"


class PowerSupplyResults(BaseModel):
    """Hi-Pot / Ground-Bond / operational outcomes for one power supply"""
    hp: TestOutcome = Field(TestOutcome.PASS, description="Hi-Pot outcome")
    gb: TestOutcome = Field(TestOutcome.PASS, description="Ground-Bond outcome")
    operational: TestOutcome = Field(TestOutcome.PASS, description="Operational check outcome")


class SerialTestResults(BaseModel):
    ps1: PowerSupplyResults = Field(default_factory=PowerSupplyResults)
    ps2: PowerSupplyResults = Field(default_factory=PowerSupplyResults)


class SerialEntry(BaseModel):
    """One physical unit tested within a work order"""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    serial_number: str = Field(..., min_length=1, max_length=MAX_TEXT_LENGTH,
                               alias="serialNumber")
    test_results: SerialTestResults = Field(default_factory=SerialTestResults, alias="testResults")


class WorkOrder(BaseModel):
    """Batch of units tested together under one work order number"""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    work_order_number: str = Field(..., min_length=1, max_length=MAX_TEXT_LENGTH,
                                   alias="workOrderNumber")
    operator: str = Field(..., min_length=1, max_length=MAX_TEXT_LENGTH)
    test_date: date = Field(..., alias="testDate")
    part_number: str = Field("", max_length=MAX_TEXT_LENGTH, alias="partNumber")
    test_voltage: str = Field("", max_length=MAX_TEXT_LENGTH, alias="testVoltage")
    serial_entries: List[SerialEntry] = Field(..., min_length=1, alias="serialEntries")


class WorkOrderSubmission(WorkOrder):
    """Validated work order plus its rendered certificate (base64 data URL)"""
    pdf_data: str = Field(..., min_length=1, alias="pdfData")
