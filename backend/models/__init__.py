"""
Hi-Pot Test Log - Database Models
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Index on pdf_logs(created_at) for newest-first listing
v1.0.0 (2026-10-01): users and pdf_logs tables
"""

from .work_order import (
    TestOutcome, PowerSupplyResults, SerialTestResults, SerialEntry,
    WorkOrder, WorkOrderSubmission,
)
from .audit import AuditRecord, AuditRecordSummary, SavedEntry
from .auth import LoginRequest, TokenResponse, Principal

import aiosqlite
import logging

from database import ensure_db_dir

logger = logging.getLogger(__name__)


async def init_db(db_path: str):
    """Initialize SQLite database with the users / pdf_logs schema"""
    ensure_db_dir(db_path)
    logger.info(f"Initializing database: {db_path}")

    async with aiosqlite.connect(db_path) as db:
        await db.execute("PRAGMA journal_mode=WAL")

        # ================================================================
        # USERS
        # ================================================================
        await db.execute("""
            CREATE TABLE IF NOT EXISTS users (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                username TEXT UNIQUE NOT NULL,
                password_hash TEXT NOT NULL
            )
        """)

        # ================================================================
        # PDF LOGS (one row per tested serial number)
        # ================================================================
        await db.execute("""
            CREATE TABLE IF NOT EXISTS pdf_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                work_order_number TEXT NOT NULL,
                operator TEXT NOT NULL,
                test_date TEXT NOT NULL,
                serial_number TEXT NOT NULL,
                pdf_data TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_pdf_logs_created_at
            ON pdf_logs (created_at)
        """)

        await db.commit()

    logger.info("Database schema ready")
