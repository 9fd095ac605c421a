"""
Tests for the pdf_logs audit store.
"""

from __future__ import annotations

from datetime import date
from itertools import count

import aiosqlite
import pytest
import pytest_asyncio

import services.audit_store as audit_store_module
from models.work_order import SerialEntry, WorkOrderSubmission
from services.audit_store import AuditStore
from services.errors import StorageError, StorageErrorCode

from conftest import SAMPLE_PDF_DATA


def _submission(wo: str, serials) -> WorkOrderSubmission:
    return WorkOrderSubmission(
        work_order_number=wo,
        operator="J.Smith",
        test_date=date(2024, 5, 1),
        serial_entries=[SerialEntry(serial_number=s) for s in serials],
        pdf_data=SAMPLE_PDF_DATA,
    )


@pytest_asyncio.fixture
async def ticking_store(store: AuditStore) -> AuditStore:
    """Store whose timestamps advance one second per call"""
    seconds = count()
    return AuditStore(store.db_path, clock=lambda: f"2024-05-01T08:00:{next(seconds):02d}.000+00:00")


class TestInsert:

    @pytest.mark.asyncio
    async def test_insert_and_read_back_unchanged(self, store: AuditStore) -> None:
        record_id, created_at = await store.insert(
            "WO-1001", "J.Smith", "2024-05-01", "SN-01", SAMPLE_PDF_DATA)

        record = await store.get(record_id)
        assert record.model_dump() == {
            "id": record_id,
            "work_order_number": "WO-1001",
            "operator": "J.Smith",
            "test_date": "2024-05-01",
            "serial_number": "SN-01",
            "pdf_data": SAMPLE_PDF_DATA,
            "created_at": created_at,
        }

    @pytest.mark.asyncio
    async def test_ids_are_fresh(self, store: AuditStore) -> None:
        first, _ = await store.insert("WO-1", "op", "2024-05-01", "SN-01", SAMPLE_PDF_DATA)
        second, _ = await store.insert("WO-1", "op", "2024-05-01", "SN-01", SAMPLE_PDF_DATA)
        assert second > first


class TestInsertSubmission:

    @pytest.mark.asyncio
    async def test_k_serials_give_k_rows_sharing_fields(self, store: AuditStore) -> None:
        records = await store.insert_submission(_submission("WO-1001", ["SN-01", "SN-02", "SN-03"]))

        listed = await store.list_records()
        assert sorted(r.id for r in listed) == sorted(r.id for r in records)
        assert sorted(r.serial_number for r in listed) == ["SN-01", "SN-02", "SN-03"]
        assert len({(r.work_order_number, r.operator, r.test_date, r.pdf_data, r.created_at)
                    for r in listed}) == 1

    @pytest.mark.asyncio
    async def test_failure_mid_submission_rolls_back_every_row(
        self, store: AuditStore, monkeypatch
    ) -> None:
        real_insert = audit_store_module.execute_insert
        calls = count(1)

        async def flaky_insert(db, sql, params=()):
            if next(calls) == 2:
                raise aiosqlite.OperationalError("disk I/O error")
            return await real_insert(db, sql, params)

        monkeypatch.setattr(audit_store_module, "execute_insert", flaky_insert)

        with pytest.raises(StorageError) as exc_info:
            await store.insert_submission(_submission("WO-1001", ["SN-01", "SN-02", "SN-03"]))

        assert exc_info.value.code == StorageErrorCode.WRITE_FAILURE
        assert exc_info.value.status_code == 500
        assert await store.count() == 0


class TestList:

    @pytest.mark.asyncio
    async def test_newest_first(self, ticking_store: AuditStore) -> None:
        await ticking_store.insert_submission(_submission("WO-1", ["A-1", "A-2"]))
        await ticking_store.insert_submission(_submission("WO-2", ["B-1"]))

        listed = await ticking_store.list_records()
        assert [r.serial_number for r in listed] == ["B-1", "A-2", "A-1"]

    @pytest.mark.asyncio
    async def test_empty_store(self, store: AuditStore) -> None:
        assert await store.list_records() == []
        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_summaries_and_describe_omit_certificates(self, store: AuditStore) -> None:
        await store.insert_submission(_submission("WO-1001", ["SN-01"]))

        summaries = await store.list_summaries()
        assert "pdf_data" not in summaries[0].model_dump()

        info = await store.describe()
        assert info["database_exists"] is True
        assert info["total_logs"] == 1
        assert {c["name"] for c in info["table_schema"]} >= {"id", "serial_number", "pdf_data"}
        assert "pdf_data" not in info["logs"][0]


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_existing(self, store: AuditStore) -> None:
        records = await store.insert_submission(_submission("WO-1001", ["SN-01", "SN-02"]))

        await store.delete_by_id(records[0].id)

        remaining = await store.list_records()
        assert [r.id for r in remaining] == [records[1].id]

    @pytest.mark.asyncio
    async def test_delete_missing_is_not_found_and_changes_nothing(self, store: AuditStore) -> None:
        await store.insert_submission(_submission("WO-1001", ["SN-01", "SN-02"]))

        with pytest.raises(StorageError) as exc_info:
            await store.delete_by_id(9999)

        assert exc_info.value.code == StorageErrorCode.NOT_FOUND
        assert exc_info.value.status_code == 404
        assert await store.count() == 2

    @pytest.mark.asyncio
    async def test_get_missing(self, store: AuditStore) -> None:
        with pytest.raises(StorageError) as exc_info:
            await store.get(42)
        assert exc_info.value.code == StorageErrorCode.NOT_FOUND
