"""
schemas/diagnostics.py
----------------------
Diagnostics snapshot, statistics, integrity findings and the exported
debug document.
"""

from datetime import datetime
from enum import Enum as PyEnum

from pydantic import BaseModel, Field

from chathub_admin.schemas.company import CompanyApprovalRead, CompanyRead, UserRead


class StatusCounts(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    unknown: int = 0


class DiagnosticsSnapshot(BaseModel):
    scanned_at: datetime
    users: StatusCounts
    companies: StatusCounts
    orphaned_users: list[UserRead]
    orphaned_companies: list[CompanyRead]
    companies_missing_status: list[CompanyRead]

    @property
    def orphaned_user_ids(self) -> list[str]:
        return [u.id for u in self.orphaned_users]

    @property
    def orphaned_company_ids(self) -> list[str]:
        return [c.id for c in self.orphaned_companies]


class ApprovalStatistics(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int
    unknown: int
    orphaned_users: int
    orphaned_companies: int
    approval_rate: float
    rejection_rate: float
    pending_rate: float


class IssueKind(str, PyEnum):
    orphaned_user = "orphaned_user"
    orphaned_company = "orphaned_company"
    missing_approval_status = "missing_approval_status"


class IntegrityIssue(BaseModel):
    kind: IssueKind
    record_id: str
    message: str


class DiagnosticsExport(BaseModel):
    """Top-level keys are camelCase to match the dashboard's debug download."""
    timestamp: datetime
    debug_data: DiagnosticsSnapshot = Field(serialization_alias="debugData")
    approvals: list[CompanyApprovalRead] = []
    approved_companies: list[CompanyApprovalRead] = Field(
        default=[], serialization_alias="approvedCompanies"
    )
    denied_companies: list[CompanyApprovalRead] = Field(
        default=[], serialization_alias="deniedCompanies"
    )
