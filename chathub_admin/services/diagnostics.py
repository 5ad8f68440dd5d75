"""
services/diagnostics.py
-----------------------
Turns a reconciliation snapshot into statistics, integrity findings and a
downloadable debug document. Pure transforms over the snapshot, apart from
export_snapshot() which writes the document to disk.
"""

from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from chathub_admin.core.logging import get_logger
from chathub_admin.db.base import utcnow
from chathub_admin.models.company import Company
from chathub_admin.schemas.company import CompanyApprovalRead
from chathub_admin.schemas.diagnostics import (
    ApprovalStatistics,
    DiagnosticsExport,
    DiagnosticsSnapshot,
    IntegrityIssue,
    IssueKind,
)

logger = get_logger(__name__)


def rate(count: int, total: int) -> float:
    """Percentage of total, one decimal place; 0 when there is nothing to divide."""
    if total <= 0:
        return 0
    return round(count / total * 100, 1)


class DiagnosticsReporter:

    def __init__(self, export_dir: str | Path) -> None:
        self.export_dir = Path(export_dir)

    @staticmethod
    def compute_statistics(snapshot: DiagnosticsSnapshot) -> ApprovalStatistics:
        counts = snapshot.companies
        return ApprovalStatistics(
            total=counts.total,
            pending=counts.pending,
            approved=counts.approved,
            rejected=counts.rejected,
            unknown=counts.unknown,
            orphaned_users=len(snapshot.orphaned_users),
            orphaned_companies=len(snapshot.orphaned_companies),
            approval_rate=rate(counts.approved, counts.total),
            rejection_rate=rate(counts.rejected, counts.total),
            pending_rate=rate(counts.pending, counts.total),
        )

    @staticmethod
    def validate_integrity(snapshot: DiagnosticsSnapshot) -> list[IntegrityIssue]:
        """Report broken links and status-less companies. Repairs nothing."""
        issues = [
            IntegrityIssue(
                kind=IssueKind.orphaned_user,
                record_id=user.id,
                message=f"User {user.email} has no company",
            )
            for user in snapshot.orphaned_users
        ]
        for company in snapshot.orphaned_companies:
            if company.user_id:
                message = f"Company {company.company_name!r} points at missing user {company.user_id}"
            else:
                message = f"Company {company.company_name!r} has no user"
            issues.append(
                IntegrityIssue(
                    kind=IssueKind.orphaned_company,
                    record_id=company.id,
                    message=message,
                )
            )
        issues.extend(
            IntegrityIssue(
                kind=IssueKind.missing_approval_status,
                record_id=company.id,
                message=f"Company {company.company_name!r} has no approval status",
            )
            for company in snapshot.companies_missing_status
        )
        return issues

    @staticmethod
    def build_export(
        snapshot: DiagnosticsSnapshot,
        approvals: Iterable[Company] = (),
        approved: Iterable[Company] = (),
        denied: Iterable[Company] = (),
        now: Optional[datetime] = None,
    ) -> DiagnosticsExport:
        return DiagnosticsExport(
            timestamp=now or utcnow(),
            debug_data=snapshot,
            approvals=[CompanyApprovalRead.model_validate(c) for c in approvals],
            approved_companies=[CompanyApprovalRead.model_validate(c) for c in approved],
            denied_companies=[CompanyApprovalRead.model_validate(c) for c in denied],
        )

    def render_export(
        self,
        snapshot: DiagnosticsSnapshot,
        approvals: Iterable[Company] = (),
        approved: Iterable[Company] = (),
        denied: Iterable[Company] = (),
        now: Optional[datetime] = None,
    ) -> tuple[str, str]:
        """Return (filename, json body) for the debug download."""
        document = self.build_export(snapshot, approvals, approved, denied, now)
        filename = f"approval-debug-{document.timestamp.strftime('%Y-%m-%dT%H-%M-%S')}.json"
        return filename, document.model_dump_json(by_alias=True, indent=2)

    def export_snapshot(
        self,
        snapshot: DiagnosticsSnapshot,
        approvals: Iterable[Company] = (),
        approved: Iterable[Company] = (),
        denied: Iterable[Company] = (),
        now: Optional[datetime] = None,
    ) -> Path:
        filename, body = self.render_export(snapshot, approvals, approved, denied, now)
        self.export_dir.mkdir(parents=True, exist_ok=True)
        path = self.export_dir / filename
        path.write_text(body, encoding="utf-8")
        logger.info("Diagnostics snapshot exported", path=str(path))
        return path
