"""
Test configuration for pytest
"""

import os

# Settings are read at import time; set them before anything imports the app.
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["BATCH_MAX_CONCURRENCY"] = "4"

import pytest
import pytest_asyncio

from chathub_admin.db.record_store import RecordStore
from chathub_admin.db.session import build_engine, build_session_factory
from chathub_admin.models import ApprovalStatus, Base
from chathub_admin.repositories.approval_repository import ApprovalRepository
from chathub_admin.services.approval_workflow import ApprovalWorkflow
from chathub_admin.services.audit import AuditTrail
from chathub_admin.services.reconciliation import ReconciliationEngine


class Seed:
    """Writes fixture records straight through the store."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    async def user(self, email: str, **fields) -> str:
        return await self.store.create("users", {"email": email, **fields})

    async def company(
        self,
        company_name="Acme Ltd",
        email="hello@acme.test",
        approval_status=ApprovalStatus.pending,
        **fields,
    ) -> str:
        return await self.store.create(
            "companies",
            {
                "company_name": company_name,
                "email": email,
                "approval_status": approval_status,
                **fields,
            },
        )


@pytest_asyncio.fixture
async def store(tmp_path):
    """A RecordStore over a fresh on-disk SQLite database."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'chathub.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield RecordStore(build_session_factory(engine))

    await engine.dispose()


@pytest.fixture
def seed(store):
    return Seed(store)


@pytest.fixture
def audit(store):
    return AuditTrail(store)


@pytest.fixture
def repository(store):
    return ApprovalRepository(store)


@pytest.fixture
def workflow(store, repository, audit):
    return ApprovalWorkflow(repository, store, audit)


@pytest.fixture
def reconciliation(store, repository, audit):
    return ReconciliationEngine(store, repository, audit)
