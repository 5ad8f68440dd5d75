"""
Unit tests for the approval workflow: transitions, bulk moves, scoped
reset and guarded deletion
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import ValidationError

from chathub_admin.core.exceptions import CompanyNotFound, InvalidTransition, ValidationFailure
from chathub_admin.db.record_store import RecordStore
from chathub_admin.models import ApprovalStatus, Company
from chathub_admin.models.company import can_transition
from chathub_admin.schemas.approval import BatchPreview, ResetScope
from chathub_admin.services.approval_workflow import ApprovalWorkflow
from chathub_admin.services.audit import AuditTrail


# ── State machine ─────────────────────────────────────────────────────────────

def test_transition_table():
    assert can_transition(ApprovalStatus.pending, ApprovalStatus.approved)
    assert can_transition(ApprovalStatus.pending, ApprovalStatus.rejected)
    assert can_transition(ApprovalStatus.approved, ApprovalStatus.pending)
    assert can_transition(ApprovalStatus.unknown, ApprovalStatus.pending)
    assert can_transition(ApprovalStatus.approved, ApprovalStatus.approved)

    assert not can_transition(ApprovalStatus.approved, ApprovalStatus.rejected)
    assert not can_transition(ApprovalStatus.rejected, ApprovalStatus.approved)
    assert not can_transition(ApprovalStatus.unknown, ApprovalStatus.approved)
    assert not can_transition(ApprovalStatus.pending, ApprovalStatus.unknown)


# ── Single transitions ────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_approve_pending_company(workflow, store, seed, audit):
    user_id = await seed.user("owner@acme.test", approval_status=ApprovalStatus.pending)
    company_id = await seed.company(user_id=user_id)

    company = await workflow.approve(company_id, actor_id="admin-1")

    assert company.approval_status == "approved"
    assert (await store.get("users", user_id)).approval_status == "approved"
    entries = await audit.entries("approved_company")
    assert len(entries) == 1
    assert entries[0].actor_id == "admin-1"
    assert entries[0].details["company_id"] == company_id


@pytest.mark.asyncio
async def test_reject_pending_company(workflow, seed):
    company_id = await seed.company()

    company = await workflow.reject(company_id, actor_id="admin-1")

    assert company.approval_status == "rejected"


@pytest.mark.asyncio
async def test_cannot_approve_rejected_company(workflow, store, seed):
    company_id = await seed.company(approval_status=ApprovalStatus.rejected)

    with pytest.raises(InvalidTransition):
        await workflow.approve(company_id)

    assert (await store.get("companies", company_id)).approval_status == "rejected"


@pytest.mark.asyncio
async def test_approve_missing_company(workflow):
    with pytest.raises(CompanyNotFound):
        await workflow.approve("ghost")


# ── Bulk approval ─────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_approve_all_pending(workflow, store, seed):
    pending = [await seed.company(f"Pending {i}") for i in range(3)]
    rejected = await seed.company("Rejected", approval_status=ApprovalStatus.rejected)

    result = await workflow.approve_all_pending(actor_id="admin-1")

    assert (result.total, result.succeeded, result.failed) == (3, 3, 0)
    for company_id in pending:
        assert (await store.get("companies", company_id)).approval_status == "approved"
    assert (await store.get("companies", rejected)).approval_status == "rejected"


@pytest.mark.asyncio
async def test_approve_all_counts_failures_without_stopping(workflow, repository, store, seed):
    """One failing write is counted; its siblings still land"""
    ids = [await seed.company(f"Pending {i}") for i in range(3)]
    apply_status = repository.apply_status

    async def flaky(company, status, actor_id=None):
        if company.id == ids[1]:
            raise RuntimeError("write rejected")
        await apply_status(company, status, actor_id)

    repository.apply_status = flaky

    result = await workflow.approve_all_pending()

    assert (result.total, result.succeeded, result.failed) == (3, 2, 1)
    assert result.success is False
    assert (await store.get("companies", ids[0])).approval_status == "approved"
    assert (await store.get("companies", ids[1])).approval_status == "pending"


@pytest.mark.asyncio
async def test_approve_all_with_nothing_pending(workflow, seed):
    await seed.company(approval_status=ApprovalStatus.approved)

    result = await workflow.approve_all_pending()

    assert result.total == 0
    assert result.success is True


# ── Scoped reset ──────────────────────────────────────────────────────────────

def test_reset_scope_must_be_explicit():
    with pytest.raises(ValidationError):
        ResetScope()
    with pytest.raises(ValidationError):
        ResetScope(company_ids=[])


@pytest.mark.asyncio
async def test_reset_defaults_to_dry_run(workflow, store, seed):
    approved = await seed.company("Approved", approval_status=ApprovalStatus.approved)
    await seed.company("Pending")

    preview = await workflow.reset_to_pending(ResetScope(approval_status=ApprovalStatus.approved))

    assert isinstance(preview, BatchPreview)
    assert preview.count == 1
    assert preview.record_ids == [approved]
    assert (await store.get("companies", approved)).approval_status == "approved"


@pytest.mark.asyncio
async def test_reset_selected_companies(workflow, store, seed, audit):
    first = await seed.company("First", approval_status=ApprovalStatus.approved)
    second = await seed.company("Second", approval_status=ApprovalStatus.rejected)
    untouched = await seed.company("Untouched", approval_status=ApprovalStatus.approved)

    result = await workflow.reset_to_pending(
        ResetScope(company_ids=[first, second]), actor_id="admin-1", dry_run=False
    )

    assert (result.total, result.succeeded) == (2, 2)
    assert (await store.get("companies", first)).approval_status == "pending"
    assert (await store.get("companies", second)).approval_status == "pending"
    assert (await store.get("companies", untouched)).approval_status == "approved"
    assert len(await audit.entries("reset_to_pending")) == 1


@pytest.mark.asyncio
async def test_reset_all_to_pending(workflow, store, seed):
    ids = [
        await seed.company("A", approval_status=ApprovalStatus.approved),
        await seed.company("B", approval_status=ApprovalStatus.rejected),
        await seed.company("C", approval_status=None),
    ]

    result = await workflow.reset_all_to_pending(actor_id="admin-1")

    assert result.succeeded == 3
    for company_id in ids:
        assert (await store.get("companies", company_id)).approval_status == "pending"


# ── Deletion ──────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
@pytest.mark.parametrize("confirmation", ["acme ltd", "Acme Ltd ", "", "Acme"])
async def test_delete_requires_exact_name_before_any_store_call(confirmation):
    store = AsyncMock(spec=RecordStore)
    workflow = ApprovalWorkflow(MagicMock(), store, AuditTrail(store))
    company = Company(id="c-1", company_name="Acme Ltd", email="hello@acme.test")

    with pytest.raises(ValidationFailure):
        await workflow.delete_company(company, confirmation, actor_id="admin-1")

    store.create.assert_not_called()
    store.delete.assert_not_called()


@pytest.mark.asyncio
async def test_nameless_company_cannot_be_confirmed():
    store = AsyncMock(spec=RecordStore)
    workflow = ApprovalWorkflow(MagicMock(), store, AuditTrail(store))

    with pytest.raises(ValidationFailure):
        await workflow.delete_company(Company(id="c-1", company_name=None), "")

    store.create.assert_not_called()


@pytest.mark.asyncio
async def test_delete_company_keeps_a_backup(workflow, repository, store, seed, audit):
    company_id = await seed.company("Acme Ltd", industry="Retail")
    company = await repository.get_company(company_id)

    backup_id = await workflow.delete_company(company, "Acme Ltd", actor_id="admin-1")

    assert await store.get("companies", company_id) is None
    backup = await store.get("deleted_companies", backup_id)
    assert backup.company_id == company_id
    assert backup.deleted_by == "admin-1"
    assert backup.payload["company_name"] == "Acme Ltd"
    assert backup.payload["industry"] == "Retail"
    assert len(await audit.entries("delete_company")) == 1


# ── Synthetic companies ───────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_synthetic_company_is_marked(workflow, store):
    now = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    company_id = await workflow.test_harness.create_synthetic_company(actor_id="admin-1", now=now)

    company = await store.get("companies", company_id)
    assert company.is_synthetic is True
    assert company.company_name.startswith("Test Company 20260102030405")
    assert company.approval_status == "pending"
    assert company.status == "inactive"


@pytest.mark.asyncio
async def test_clear_companies_previews_then_deletes_with_backups(workflow, store, seed):
    rejected = [
        await seed.company(f"Rejected {i}", approval_status=ApprovalStatus.rejected) for i in range(2)
    ]
    kept = await seed.company("Pending")
    scope = ResetScope(approval_status=ApprovalStatus.rejected)

    preview = await workflow.clear_companies(scope)
    assert sorted(preview.record_ids) == sorted(rejected)
    assert len(await store.list("companies")) == 3

    result = await workflow.clear_companies(scope, actor_id="admin-1", dry_run=False)

    assert result.succeeded == 2
    assert [c.id for c in await store.list("companies")] == [kept]
    backups = await store.list("deleted_companies")
    assert sorted(b.company_id for b in backups) == sorted(rejected)
    assert {b.deleted_by for b in backups} == {"admin-1"}


@pytest.mark.asyncio
async def test_repeating_a_decision_is_harmless(workflow, seed, audit):
    approved_id = await seed.company("Approved Twice")
    rejected_id = await seed.company("Rejected Twice")

    await workflow.approve(approved_id, actor_id="admin-1")
    again = await workflow.approve(approved_id, actor_id="admin-1")
    await workflow.reject(rejected_id, actor_id="admin-1")
    rejected_again = await workflow.reject(rejected_id, actor_id="admin-1")

    assert again.approval_status == "approved"
    assert rejected_again.approval_status == "rejected"
    assert len(await audit.entries("approved_company")) == 2
    assert len(await audit.entries("rejected_company")) == 2


@pytest.mark.asyncio
async def test_reset_scope_unknown_selects_blank_statuses(workflow, store, seed):
    blank = await seed.company("Blank", approval_status="")
    await seed.company("Pending")

    preview = await workflow.reset_to_pending(ResetScope(approval_status=ApprovalStatus.unknown))

    assert preview.record_ids == [blank]
