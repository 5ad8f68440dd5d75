"""
api/routes/diagnostics.py
-------------------------
Read-only reporting over a fresh reconciliation scan.

GET /admin/diagnostics/statistics  — Counts and approval/rejection/pending rates.
GET /admin/diagnostics/integrity   — Orphans and status-less companies.
GET /admin/diagnostics/export      — Download the snapshot plus the approval queues.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from chathub_admin.dependencies import (
    get_approval_repository,
    get_current_admin,
    get_diagnostics_reporter,
    get_reconciliation_engine,
)
from chathub_admin.models.company import ApprovalStatus
from chathub_admin.models.user import User
from chathub_admin.repositories.approval_repository import ApprovalRepository
from chathub_admin.schemas.diagnostics import ApprovalStatistics, IntegrityIssue
from chathub_admin.services.diagnostics import DiagnosticsReporter
from chathub_admin.services.reconciliation import ReconciliationEngine

router = APIRouter(prefix="/admin/diagnostics", tags=["Diagnostics"])


@router.get(
    "/statistics",
    response_model=ApprovalStatistics,
    summary="Approval counts and rates",
)
async def statistics(
    engine: Annotated[ReconciliationEngine, Depends(get_reconciliation_engine)],
    reporter: Annotated[DiagnosticsReporter, Depends(get_diagnostics_reporter)],
    admin: Annotated[User, Depends(get_current_admin)],
) -> ApprovalStatistics:
    snapshot = await engine.scan()
    return reporter.compute_statistics(snapshot)


@router.get(
    "/integrity",
    response_model=list[IntegrityIssue],
    summary="List data-integrity findings",
)
async def integrity(
    engine: Annotated[ReconciliationEngine, Depends(get_reconciliation_engine)],
    reporter: Annotated[DiagnosticsReporter, Depends(get_diagnostics_reporter)],
    admin: Annotated[User, Depends(get_current_admin)],
) -> list[IntegrityIssue]:
    snapshot = await engine.scan()
    return reporter.validate_integrity(snapshot)


@router.get(
    "/export",
    summary="Download a diagnostics snapshot as JSON",
    response_class=Response,
)
async def export(
    engine: Annotated[ReconciliationEngine, Depends(get_reconciliation_engine)],
    repository: Annotated[ApprovalRepository, Depends(get_approval_repository)],
    reporter: Annotated[DiagnosticsReporter, Depends(get_diagnostics_reporter)],
    admin: Annotated[User, Depends(get_current_admin)],
) -> Response:
    """
    The approval lists are the ones the dashboard last displayed; they are
    loaded here if nothing has been displayed yet.
    """
    snapshot = await engine.scan()
    if not repository.is_loaded:
        await repository.refresh()
    filename, body = reporter.render_export(
        snapshot,
        approvals=repository.visible(ApprovalStatus.pending),
        approved=repository.visible(ApprovalStatus.approved),
        denied=repository.visible(ApprovalStatus.rejected),
    )
    return Response(
        content=body,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
