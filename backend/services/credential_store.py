"""
Hi-Pot Test Log - Credential Store
Version: 1.0.0

Changelog:
v1.0.0 (2026-10-01): users table lookups for login and bootstrap seeding
"""

import logging
from typing import Optional

from database import connect, execute_one, execute_insert, transaction

logger = logging.getLogger(__name__)


class CredentialStore:
    """Read/write access to the users table of one database file"""

    def __init__(self, db_path: str):
        self.db_path = db_path

    async def get_by_username(self, username: str) -> Optional[dict]:
        async with connect(self.db_path) as db:
            return await execute_one(
                db,
                "SELECT id, username, password_hash FROM users WHERE username = ?",
                (username,),
            )

    async def create_user(self, username: str, password_hash: str) -> int:
        async with connect(self.db_path) as db:
            async with transaction(db):
                user_id = await execute_insert(
                    db,
                    "INSERT INTO users (username, password_hash) VALUES (?, ?)",
                    (username, password_hash),
                )
        logger.info(f"Created user {username} (id={user_id})")
        return user_id
