"""
services/approval_workflow.py
-----------------------------
Use-cases behind the admin approval screens.

This is the only write path for Company.approval_status. Single-record
moves are checked against the approval state machine; bulk moves report
one aggregate result. Every mutation leaves an audit entry naming the
admin who ran it.
"""

from datetime import datetime
from typing import Optional, Union

from chathub_admin.core.config import settings
from chathub_admin.core.exceptions import InvalidTransition, ValidationFailure
from chathub_admin.core.logging import get_logger
from chathub_admin.db.base import utcnow
from chathub_admin.db.record_store import RecordStore
from chathub_admin.models.company import (
    ApprovalStatus,
    Company,
    CompanyStatus,
    can_transition,
)
from chathub_admin.repositories.approval_repository import ApprovalRepository
from chathub_admin.schemas.approval import BatchPreview, BatchResult, ResetScope
from chathub_admin.schemas.company import CompanyRead
from chathub_admin.services.audit import AuditTrail
from chathub_admin.services.batch import run_batch

logger = get_logger(__name__)


class SyntheticCompanyHarness:
    """
    Writes clearly-marked test companies into the live store to prove the
    write path works end to end. Not sandboxed.
    """

    def __init__(self, store: RecordStore, audit: AuditTrail) -> None:
        self._store = store
        self._audit = audit

    async def create_synthetic_company(
        self,
        actor_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> str:
        stamp = (now or utcnow()).strftime("%Y%m%d%H%M%S%f")
        company_id = await self._store.create(
            "companies",
            {
                "company_name": f"{settings.SYNTHETIC_COMPANY_PREFIX} {stamp}",
                "email": f"test-{stamp}@example.com",
                "industry": "Testing",
                "description": "Synthetic company created to check the approval write path",
                "approval_status": ApprovalStatus.pending,
                "status": CompanyStatus.inactive,
                "is_synthetic": True,
            },
        )
        await self._audit.record("create_synthetic_company", actor_id, company_id=company_id)
        logger.info("Synthetic company created", company_id=company_id)
        return company_id


class ApprovalWorkflow:

    def __init__(
        self,
        repository: ApprovalRepository,
        store: RecordStore,
        audit: AuditTrail,
    ) -> None:
        self._repository = repository
        self._store = store
        self._audit = audit
        self.test_harness = SyntheticCompanyHarness(store, audit)

    # ── Single-record transitions ─────────────────────────────────────────────

    async def approve(self, company_id: str, actor_id: Optional[str] = None) -> Company:
        return await self._transition(company_id, ApprovalStatus.approved, actor_id)

    async def reject(self, company_id: str, actor_id: Optional[str] = None) -> Company:
        return await self._transition(company_id, ApprovalStatus.rejected, actor_id)

    async def _transition(
        self,
        company_id: str,
        target: ApprovalStatus,
        actor_id: Optional[str],
    ) -> Company:
        company = await self._repository.get_company(company_id)
        current = company.effective_approval_status
        if not can_transition(current, target):
            raise InvalidTransition(current.value, target.value)

        updated = await self._repository.set_approval_status(company_id, target, actor_id)
        await self._audit.record(
            f"{target.value}_company",
            actor_id,
            company_id=company_id,
            previous_status=current.value,
        )
        return updated

    # ── Bulk transitions ──────────────────────────────────────────────────────

    async def approve_all_pending(self, actor_id: Optional[str] = None) -> BatchResult:
        pending = await self._store.list(
            "companies", filters={"approval_status": ApprovalStatus.pending}
        )

        async def _approve(company: Company) -> None:
            await self._repository.apply_status(company, ApprovalStatus.approved, actor_id)

        result = await run_batch("approve_all_pending", pending, _approve, key=lambda c: c.id)
        await self._audit.record(
            "approve_all_pending",
            actor_id,
            affected_count=result.succeeded,
            total=result.total,
            failed=result.failed,
        )
        return result

    async def reset_to_pending(
        self,
        scope: ResetScope,
        actor_id: Optional[str] = None,
        dry_run: bool = True,
    ) -> Union[BatchPreview, BatchResult]:
        """
        Put the companies selected by scope back to pending.

        Defaults to a dry run that only reports what would change.
        """
        targets = await self._select(scope)
        target_ids = [c.id for c in targets]

        if dry_run:
            return BatchPreview(action="reset_to_pending", count=len(targets), record_ids=target_ids)

        async def _reset(company: Company) -> None:
            await self._repository.apply_status(company, ApprovalStatus.pending, actor_id)

        result = await run_batch("reset_to_pending", targets, _reset, key=lambda c: c.id)
        await self._audit.record(
            "reset_to_pending",
            actor_id,
            affected_count=result.succeeded,
            scope=scope.model_dump(mode="json"),
            failed=result.failed,
        )
        return result

    async def reset_all_to_pending(self, actor_id: Optional[str] = None) -> BatchResult:
        return await self.reset_to_pending(
            ResetScope(all_companies=True), actor_id=actor_id, dry_run=False
        )

    async def _select(self, scope: ResetScope) -> list[Company]:
        if scope.approval_status is ApprovalStatus.unknown:
            companies = await self._repository.list_missing_status()
        elif scope.approval_status is not None:
            companies = await self._store.list(
                "companies", filters={"approval_status": scope.approval_status}
            )
        else:
            companies = await self._store.list("companies")
        if scope.company_ids is not None:
            wanted = set(scope.company_ids)
            companies = [c for c in companies if c.id in wanted]
        return companies

    # ── Deletion ──────────────────────────────────────────────────────────────

    async def clear_companies(
        self,
        scope: ResetScope,
        actor_id: Optional[str] = None,
        dry_run: bool = True,
    ) -> Union[BatchPreview, BatchResult]:
        """
        Delete every company selected by scope, backing each one up first.

        Like reset_to_pending this only previews unless dry_run is False.
        """
        targets = await self._select(scope)

        if dry_run:
            return BatchPreview(
                action="clear_companies",
                count=len(targets),
                record_ids=[c.id for c in targets],
            )

        async def _clear(company: Company) -> str:
            return await self._backup_and_delete(company, actor_id)

        result = await run_batch("clear_companies", targets, _clear, key=lambda c: c.id)
        self._repository.invalidate()
        await self._audit.record(
            "clear_companies",
            actor_id,
            affected_count=result.succeeded,
            scope=scope.model_dump(mode="json"),
            failed=result.failed,
        )
        return result

    async def _backup_and_delete(self, company: Company, actor_id: Optional[str] = None) -> str:
        backup_id = await self._store.create(
            "deleted_companies",
            {
                "company_id": company.id,
                "company_name": company.company_name,
                "payload": CompanyRead.model_validate(company).model_dump(mode="json"),
                "deleted_by": actor_id,
            },
        )
        await self._store.delete("companies", company.id)
        return backup_id

    async def delete_company(
        self,
        company: Company,
        confirmation: str,
        actor_id: Optional[str] = None,
    ) -> str:
        """
        Delete a company after the operator has typed its exact name.

        A backup of the full document is written to deleted_companies first.
        Returns the backup id.
        """
        if not company.company_name or confirmation != company.company_name:
            raise ValidationFailure(
                "Confirmation text does not match the company name"
            )

        backup_id = await self._backup_and_delete(company, actor_id)
        self._repository.invalidate()
        await self._audit.record(
            "delete_company", actor_id, company_id=company.id, backup_id=backup_id
        )
        logger.info("Company deleted", company_id=company.id, backup_id=backup_id)
        return backup_id
