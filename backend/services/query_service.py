"""
Hi-Pot Test Log - Query Service
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Warn when a full-list read exceeds the configured size
v1.0.0 (2026-10-01): Token-gated list / get / delete over the audit store

Every operation validates the bearer token before touching the store.
Search and filtering are done by the client over the full list.
"""

import logging
from typing import List, Optional

from models.audit import AuditRecord
from services.audit_store import AuditStore
from services.auth_gate import AuthGate

logger = logging.getLogger(__name__)


class QueryService:

    def __init__(self, auth_gate: AuthGate, store: AuditStore, warn_threshold: int = 5000):
        self.auth_gate = auth_gate
        self.store = store
        self.warn_threshold = warn_threshold

    async def list_records(self, token: Optional[str]) -> List[AuditRecord]:
        principal = self.auth_gate.validate_token(token)
        records = await self.store.list_records()
        logger.info(f"Fetched {len(records)} logs for {principal.username}")
        if len(records) > self.warn_threshold:
            logger.warning(f"Full log list is {len(records)} rows "
                           f"(threshold {self.warn_threshold}); every read returns "
                           f"all certificates")
        return records

    async def get_record(self, token: Optional[str], record_id: int) -> AuditRecord:
        self.auth_gate.validate_token(token)
        return await self.store.get(record_id)

    async def delete_record(self, token: Optional[str], record_id: int):
        principal = self.auth_gate.validate_token(token)
        logger.info(f"Deleting log {record_id} for {principal.username}")
        await self.store.delete_by_id(record_id)
