"""
Hi-Pot Test Log - Audit Store Service
Version: 1.2.0

Changelog:
v1.2.0 (2026-10-12): insert_submission writes every serial row of a work order
                      in one transaction; any failure rolls the whole
                      submission back
v1.1.0 (2026-10-07): list_summaries / describe for the diagnostics route
v1.0.0 (2026-10-01): Initial pdf_logs store

One row per tested serial number. Rows are immutable once written; the only
mutation is delete by id. Every row of a submission carries the same
certificate data URL and the same created_at.
"""

import logging
import os
from datetime import datetime, timezone
from typing import Callable, List, Tuple

import aiosqlite

from database import (
    connect, execute_all, execute_insert, execute_one, execute_update, transaction,
)
from models.audit import AuditRecord, AuditRecordSummary
from models.work_order import WorkOrderSubmission
from services.errors import StorageError, StorageErrorCode

logger = logging.getLogger(__name__)

INSERT_SQL = """
    INSERT INTO pdf_logs (
        work_order_number, operator, test_date, serial_number,
        pdf_data, created_at
    ) VALUES (?, ?, ?, ?, ?, ?)
"""

SUMMARY_COLUMNS = "id, work_order_number, operator, test_date, serial_number, created_at"


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


class AuditStore:
    """pdf_logs persistence for one database file"""

    def __init__(self, db_path: str, clock: Callable[[], str] = _timestamp):
        self.db_path = db_path
        self._clock = clock

    async def insert(self, work_order_number: str, operator: str, test_date: str,
                     serial_number: str, pdf_data: str) -> Tuple[int, str]:
        """Insert a single row; returns (id, created_at)"""
        created_at = self._clock()
        try:
            async with connect(self.db_path) as db:
                async with transaction(db):
                    record_id = await execute_insert(db, INSERT_SQL, (
                        work_order_number, operator, test_date, serial_number,
                        pdf_data, created_at,
                    ))
        except aiosqlite.Error as e:
            logger.error(f"Failed to save serial {serial_number}: {e}")
            raise StorageError(StorageErrorCode.WRITE_FAILURE,
                               f"Failed to save serial {serial_number}: {e}") from e
        return record_id, created_at

    async def insert_submission(self, submission: WorkOrderSubmission) -> List[AuditRecord]:
        """Fan a validated work order out into one row per serial entry, atomically"""
        wo_number = submission.work_order_number
        test_date = submission.test_date.isoformat()
        created_at = self._clock()
        records = []

        try:
            async with connect(self.db_path) as db:
                async with transaction(db):
                    for entry in submission.serial_entries:
                        record_id = await execute_insert(db, INSERT_SQL, (
                            wo_number, submission.operator, test_date,
                            entry.serial_number, submission.pdf_data, created_at,
                        ))
                        records.append(AuditRecord(
                            id=record_id,
                            work_order_number=wo_number,
                            operator=submission.operator,
                            test_date=test_date,
                            serial_number=entry.serial_number,
                            pdf_data=submission.pdf_data,
                            created_at=created_at,
                        ))
        except aiosqlite.Error as e:
            logger.error(f"Failed to save work order {wo_number}, rolled back "
                         f"{len(records)} pending row(s): {e}")
            raise StorageError(StorageErrorCode.WRITE_FAILURE,
                               f"Failed to save work order {wo_number}: {e}") from e

        logger.info(f"Saved work order {wo_number}: {len(records)} serial row(s)")
        return records

    async def list_records(self) -> List[AuditRecord]:
        """All records, newest first"""
        async with connect(self.db_path) as db:
            rows = await execute_all(db, """
                SELECT id, work_order_number, operator, test_date,
                       serial_number, pdf_data, created_at
                FROM pdf_logs
                ORDER BY created_at DESC, id DESC
            """)
        return [AuditRecord(**row) for row in rows]

    async def list_summaries(self) -> List[AuditRecordSummary]:
        async with connect(self.db_path) as db:
            rows = await execute_all(
                db,
                f"SELECT {SUMMARY_COLUMNS} FROM pdf_logs ORDER BY created_at DESC, id DESC",
            )
        return [AuditRecordSummary(**row) for row in rows]

    async def get(self, record_id: int) -> AuditRecord:
        async with connect(self.db_path) as db:
            row = await execute_one(db, "SELECT * FROM pdf_logs WHERE id = ?", (record_id,))
        if not row:
            raise StorageError(StorageErrorCode.NOT_FOUND, "Log not found")
        return AuditRecord(**row)

    async def delete_by_id(self, record_id: int):
        """Delete one row; raises NOT_FOUND without touching anything else"""
        try:
            async with connect(self.db_path) as db:
                deleted = await execute_update(
                    db, "DELETE FROM pdf_logs WHERE id = ?", (record_id,))
        except aiosqlite.Error as e:
            logger.error(f"Failed to delete log {record_id}: {e}")
            raise StorageError(StorageErrorCode.WRITE_FAILURE,
                               f"Failed to delete log {record_id}: {e}") from e

        if deleted == 0:
            raise StorageError(StorageErrorCode.NOT_FOUND, "Log not found")
        logger.info(f"Deleted log {record_id}")

    async def count(self) -> int:
        async with connect(self.db_path) as db:
            row = await execute_one(db, "SELECT COUNT(*) AS total FROM pdf_logs")
        return row["total"]

    async def describe(self) -> dict:
        """Database diagnostics: file, schema and per-record metadata"""
        async with connect(self.db_path) as db:
            schema = await execute_all(db, "PRAGMA table_info(pdf_logs)")
        summaries = await self.list_summaries()
        return {
            "database_exists": os.path.exists(self.db_path),
            "database_path": self.db_path,
            "table_schema": schema,
            "total_logs": len(summaries),
            "logs": [s.model_dump() for s in summaries],
        }
