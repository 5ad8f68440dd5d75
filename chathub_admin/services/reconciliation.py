"""
services/reconciliation.py
--------------------------
Detects and repairs broken user ↔ company links.

An orphaned user has no company whose user_id points at it. An orphaned
company points at no existing user (or at nobody). Both sets are derived
from a full read of the two collections on every scan and are never
persisted; the engine only remembers the most recent scan so bulk repairs
act on what the operator was shown.

Repairs are explicit operator actions. Nothing here runs on its own.
"""

from typing import Optional, Union

from chathub_admin.core.exceptions import CompanyAlreadyExists, UserNotFound
from chathub_admin.core.logging import get_logger
from chathub_admin.db.base import utcnow
from chathub_admin.db.record_store import RecordStore
from chathub_admin.models.company import ApprovalStatus, Company, CompanyStatus
from chathub_admin.models.user import User
from chathub_admin.repositories.approval_repository import ApprovalRepository
from chathub_admin.schemas.approval import BatchPreview, BatchResult
from chathub_admin.schemas.company import CompanyRead, UserRead
from chathub_admin.schemas.diagnostics import DiagnosticsSnapshot, StatusCounts
from chathub_admin.services.audit import AuditTrail
from chathub_admin.services.batch import run_batch

logger = get_logger(__name__)


def _count_statuses(records: list) -> StatusCounts:
    counts = StatusCounts(total=len(records))
    for record in records:
        status = record.effective_approval_status
        setattr(counts, status.value, getattr(counts, status.value) + 1)
    return counts


def placeholder_company_name(user: User) -> str:
    local_part = (user.email or "").split("@")[0]
    return f"Company for {local_part or 'User'}"


class ReconciliationEngine:

    def __init__(
        self,
        store: RecordStore,
        repository: ApprovalRepository,
        audit: AuditTrail,
    ) -> None:
        self._store = store
        self._repository = repository
        self._audit = audit
        self._last_snapshot: Optional[DiagnosticsSnapshot] = None

    @property
    def last_snapshot(self) -> Optional[DiagnosticsSnapshot]:
        return self._last_snapshot

    # ── Scan ──────────────────────────────────────────────────────────────────

    async def scan(self) -> DiagnosticsSnapshot:
        users = await self._store.list("users")
        companies = await self._store.list("companies")

        user_ids = {u.id for u in users}
        linked_user_ids = {c.user_id for c in companies if c.user_id}

        orphaned_users = [u for u in users if u.id not in linked_user_ids]
        orphaned_companies = [c for c in companies if c.user_id not in user_ids]
        missing_status = [
            c for c in companies
            if c.effective_approval_status is ApprovalStatus.unknown
        ]

        snapshot = DiagnosticsSnapshot(
            scanned_at=utcnow(),
            users=_count_statuses(users),
            companies=_count_statuses(companies),
            orphaned_users=[UserRead.model_validate(u) for u in orphaned_users],
            orphaned_companies=[CompanyRead.model_validate(c) for c in orphaned_companies],
            companies_missing_status=[CompanyRead.model_validate(c) for c in missing_status],
        )
        self._last_snapshot = snapshot

        logger.info(
            "Reconciliation scan completed",
            users=len(users),
            companies=len(companies),
            orphaned_users=len(orphaned_users),
            orphaned_companies=len(orphaned_companies),
            missing_status=len(missing_status),
        )
        return snapshot

    async def _current_snapshot(self) -> DiagnosticsSnapshot:
        return self._last_snapshot or await self.scan()

    # ── Single-record repairs ─────────────────────────────────────────────────

    async def fix_orphan_user(self, user_id: str, actor_id: Optional[str] = None) -> str:
        """
        Create a pending company for the user and link it back.

        Not guarded against a user that has been fixed since the last scan;
        run scan() first when in doubt.
        """
        user = await self._store.get("users", user_id)
        if user is None:
            raise UserNotFound(user_id)
        company_id = await self._create_company_for(user)
        await self._audit.record(
            "fix_orphan_user", actor_id, user_id=user_id, company_id=company_id
        )
        return company_id

    async def create_company_for_email(
        self, email: str, actor_id: Optional[str] = None
    ) -> str:
        user = await self._repository.find_user_by_email(email)
        if user is None:
            raise UserNotFound(email)
        if user.company_id:
            raise CompanyAlreadyExists(user.id, user.company_id)
        company_id = await self._create_company_for(user)
        await self._audit.record(
            "create_company_for_email", actor_id, user_id=user.id, company_id=company_id
        )
        return company_id

    async def _create_company_for(self, user: User) -> str:
        company_id = await self._store.create(
            "companies",
            {
                "company_name": user.company_name or placeholder_company_name(user),
                "email": user.email,
                "user_id": user.id,
                "approval_status": ApprovalStatus.pending,
                "status": CompanyStatus.inactive,
                "subscription": {"plan": "Free", "status": "pending"},
            },
        )
        await self._store.update(
            "users",
            user.id,
            {"company_id": company_id, "approval_status": ApprovalStatus.pending},
        )
        self._repository.invalidate()
        logger.info("Company created for orphaned user", user_id=user.id, company_id=company_id)
        return company_id

    # ── Bulk repairs ──────────────────────────────────────────────────────────

    async def fix_all_orphans(self, actor_id: Optional[str] = None) -> BatchResult:
        snapshot = await self._current_snapshot()
        user_ids = snapshot.orphaned_user_ids

        async def _fix(user_id: str) -> str:
            user = await self._store.get("users", user_id)
            if user is None:
                raise UserNotFound(user_id)
            return await self._create_company_for(user)

        result = await run_batch("fix_orphan_users", user_ids, _fix)
        self._last_snapshot = None
        await self._audit.record(
            "fix_all_orphans",
            actor_id,
            affected_count=result.succeeded,
            total=result.total,
            failed=result.failed,
        )
        return result

    async def delete_orphan_companies(
        self, actor_id: Optional[str] = None, dry_run: bool = False
    ) -> Union[BatchPreview, BatchResult]:
        snapshot = await self._current_snapshot()
        company_ids = snapshot.orphaned_company_ids

        if dry_run:
            return BatchPreview(
                action="delete_orphan_companies",
                count=len(company_ids),
                record_ids=company_ids,
            )

        async def _delete(company_id: str) -> None:
            await self._store.delete("companies", company_id)

        result = await run_batch("delete_orphan_companies", company_ids, _delete)
        self._last_snapshot = None
        self._repository.invalidate()
        await self._audit.record(
            "delete_orphan_companies",
            actor_id,
            affected_count=result.succeeded,
            company_ids=company_ids,
            failed=result.failed,
        )
        return result

    async def fix_missing_approval_status(self, actor_id: Optional[str] = None) -> BatchResult:
        """Give every company without a usable approval status the pending status."""
        companies = await self._repository.list_missing_status()

        async def _fix(company: Company) -> None:
            await self._store.update(
                "companies", company.id, {"approval_status": ApprovalStatus.pending}
            )

        result = await run_batch(
            "fix_missing_approval_status", companies, _fix, key=lambda c: c.id
        )
        self._last_snapshot = None
        self._repository.invalidate()
        await self._audit.record(
            "fix_missing_approval_status",
            actor_id,
            affected_count=result.succeeded,
            failed=result.failed,
        )
        return result
