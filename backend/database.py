"""
Hi-Pot Test Log - Database Connection Manager
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): transaction() helper; one commit per ingestion request
v1.0.0 (2026-10-01): Initial database connection manager with async helpers

Provides async SQLite connection helpers for the store classes. Each store is
constructed with an explicit database path; nothing here holds a process-wide
connection. Uses aiosqlite with WAL journal mode.
"""

import os
import aiosqlite
from contextlib import asynccontextmanager


def ensure_db_dir(db_path: str) -> str:
    """Create the directory holding the database file, return the path"""
    os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
    return db_path


@asynccontextmanager
async def connect(db_path: str):
    """Async context manager yielding an aiosqlite connection with WAL"""
    db = await aiosqlite.connect(db_path)
    db.row_factory = aiosqlite.Row
    await db.execute("PRAGMA journal_mode=WAL")
    try:
        yield db
    finally:
        await db.close()


@asynccontextmanager
async def transaction(db):
    """Commit everything executed inside the block, or roll all of it back"""
    try:
        yield db
    except BaseException:
        await db.rollback()
        raise
    else:
        await db.commit()


async def execute_one(db, sql: str, params=()) -> dict | None:
    """Execute query and return first row as dict, or None"""
    cursor = await db.execute(sql, params)
    row = await cursor.fetchone()
    return dict(row) if row else None


async def execute_all(db, sql: str, params=()) -> list[dict]:
    """Execute query and return all rows as list of dicts"""
    cursor = await db.execute(sql, params)
    rows = await cursor.fetchall()
    return [dict(row) for row in rows]


async def execute_insert(db, sql: str, params=()) -> int:
    """Execute INSERT without committing and return lastrowid"""
    cursor = await db.execute(sql, params)
    return cursor.lastrowid


async def execute_update(db, sql: str, params=()) -> int:
    """Execute UPDATE/DELETE, commit, and return rowcount"""
    cursor = await db.execute(sql, params)
    await db.commit()
    return cursor.rowcount
