"""
tests/conftest.py

Shared fixtures: a throwaway SQLite database per test, settings pointing at
it, an app client with the default account seeded, and sample payloads.
"""

from __future__ import annotations

import base64
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from config import Settings
from models import init_db
from services.audit_store import AuditStore
from services.credential_store import CredentialStore

TEST_SECRET = "test-signing-key-for-hipot-log-0123456789"

SAMPLE_PDF = b"%PDF-1.4\n% sample certificate body\n%%EOF\n"
SAMPLE_PDF_DATA = "data:application/pdf;base64," + base64.b64encode(SAMPLE_PDF).decode("ascii")


class FakeClock:
    """Settable replacement for datetime.now(timezone.utc)"""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        SQLITE_DB_PATH=str(tmp_path / "data" / "hipot_test.db"),
        DATA_DIR=str(tmp_path / "data"),
        LOGS_DIR=str(tmp_path / "logs"),
        JWT_SECRET_KEY=TEST_SECRET,
        BCRYPT_ROUNDS=4,
    )


@pytest.fixture
def db_path(settings: Settings) -> str:
    return settings.SQLITE_DB_PATH


@pytest_asyncio.fixture
async def store(db_path: str) -> AuditStore:
    await init_db(db_path)
    return AuditStore(db_path)


@pytest_asyncio.fixture
async def credentials(db_path: str) -> CredentialStore:
    await init_db(db_path)
    return CredentialStore(db_path)


@pytest.fixture
def client(settings: Settings):
    from main import create_app

    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def token(client: TestClient) -> str:
    response = client.post("/api/auth/login", json={"username": "admin", "password": "admin"})
    assert response.status_code == 200
    return response.json()["token"]


@pytest.fixture
def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def work_order_payload() -> dict:
    return {
        "workOrderNumber": "WO-1001",
        "operator": "J.Smith",
        "testDate": "2024-05-01",
        "partNumber": "PN-4471",
        "testVoltage": "240V",
        "serialEntries": [{"serialNumber": "SN-01"}, {"serialNumber": "SN-02"}],
        "pdfData": SAMPLE_PDF_DATA,
    }
