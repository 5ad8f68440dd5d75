"""
repositories/approval_repository.py
-----------------------------------
Reads and writes approval-status-tagged companies and users.

The repository owns an in-memory cache of the approval queues the
dashboard displays. The cache is only ever replaced by refresh() and
dropped by invalidate(); store reads made through list_by_status() always
go to the store, so "what is displayed" and "what is stored" can be told
apart.
"""

from typing import Optional

from chathub_admin.core.exceptions import CompanyNotFound, RecordNotFound
from chathub_admin.core.logging import get_logger
from chathub_admin.db.base import utcnow
from chathub_admin.db.record_store import RecordStore
from chathub_admin.models.company import ApprovalStatus, Company
from chathub_admin.models.user import User

logger = get_logger(__name__)


class ApprovalRepository:

    def __init__(self, store: RecordStore) -> None:
        self._store = store
        self._views: Optional[dict[ApprovalStatus, list[Company]]] = None

    # ── Display cache ─────────────────────────────────────────────────────────

    async def refresh(self) -> dict[ApprovalStatus, list[Company]]:
        views = {}
        for status in ApprovalStatus.stored():
            views[status] = await self.list_by_status(status)
        self._views = views
        return views

    def invalidate(self) -> None:
        self._views = None

    @property
    def is_loaded(self) -> bool:
        return self._views is not None

    def visible(self, status: ApprovalStatus) -> list[Company]:
        """Last refreshed queue for status; empty until refresh() has run."""
        if self._views is None:
            return []
        return list(self._views.get(status, []))

    # ── Reads ─────────────────────────────────────────────────────────────────

    async def list_pending_companies(self) -> list[Company]:
        return await self.list_by_status(ApprovalStatus.pending)

    async def list_by_status(self, status: ApprovalStatus) -> list[Company]:
        """
        Companies in one approval state, newest first.

        Records missing a company name or email are left out of the result
        (they stay in the store). ApprovalStatus.unknown selects companies
        whose status is missing, blank or unrecognised.
        """
        if status is ApprovalStatus.unknown:
            companies = await self.list_missing_status()
        else:
            companies = await self._store.list(
                "companies",
                filters={"approval_status": status.value},
                order_by="created_at",
            )
        return [c for c in companies if c.is_displayable]

    async def list_missing_status(self) -> list[Company]:
        """Every company that reads as ApprovalStatus.unknown, newest first."""
        companies = await self._store.list("companies", order_by="created_at")
        return [
            c for c in companies
            if c.effective_approval_status is ApprovalStatus.unknown
        ]

    async def get_company(self, company_id: str) -> Company:
        company = await self._store.get("companies", company_id)
        if company is None:
            raise CompanyNotFound(company_id)
        return company

    async def find_user_by_email(self, email: str) -> Optional[User]:
        users = await self._store.list("users", filters={"email": email})
        return users[0] if users else None

    # ── Writes ────────────────────────────────────────────────────────────────

    async def set_approval_status(
        self,
        company_id: str,
        status: ApprovalStatus,
        actor_id: Optional[str] = None,
    ) -> Company:
        """
        Write status onto the company, then mirror it onto the linked user.

        The two writes are independent. If the second one fails the pair is
        left diverged for the reconciliation scan to report.
        """
        try:
            await self._store.update(
                "companies", company_id, self._status_patch(status, actor_id)
            )
        except RecordNotFound:
            raise CompanyNotFound(company_id) from None

        company = await self.get_company(company_id)
        await self.mirror_to_user(company.user_id, status)
        self.invalidate()

        logger.info(
            "Company approval status updated",
            company_id=company_id,
            status=status.value,
            actor_id=actor_id,
        )
        return company

    async def apply_status(
        self,
        company: Company,
        status: ApprovalStatus,
        actor_id: Optional[str] = None,
    ) -> None:
        """Batch variant of set_approval_status for an already-loaded company."""
        await self._store.update("companies", company.id, self._status_patch(status, actor_id))
        await self.mirror_to_user(company.user_id, status)
        self.invalidate()

    async def mirror_to_user(self, user_id: Optional[str], status: ApprovalStatus) -> None:
        if not user_id:
            return
        try:
            await self._store.update("users", user_id, {"approval_status": status.value})
        except RecordNotFound:
            logger.warning(
                "Linked user missing, approval status not mirrored",
                user_id=user_id,
                status=status.value,
            )

    @staticmethod
    def _status_patch(status: ApprovalStatus, actor_id: Optional[str]) -> dict:
        if status is ApprovalStatus.unknown:
            raise ValueError("ApprovalStatus.unknown cannot be written")
        if status is ApprovalStatus.pending:
            return {"approval_status": status.value, "approved_by": None, "approved_at": None}
        return {
            "approval_status": status.value,
            "approved_by": actor_id,
            "approved_at": utcnow(),
        }
