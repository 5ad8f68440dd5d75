"""
api/routes/reconciliation.py
----------------------------
Orphan detection and repair.

GET  /admin/reconciliation/scan                      — Full scan, returns the snapshot.
POST /admin/reconciliation/users/{id}/fix            — Create a company for one orphaned user.
POST /admin/reconciliation/fix-all                   — Fix every user in the last scan.
POST /admin/reconciliation/orphan-companies/delete   — Delete companies from the last scan.
POST /admin/reconciliation/companies                 — Create a company for a user by email.
POST /admin/reconciliation/missing-status/fix        — Set pending where status is missing.
"""

from typing import Annotated, Union

from fastapi import APIRouter, Depends, HTTPException, Query, status

from chathub_admin.core.exceptions import CompanyAlreadyExists, UserNotFound
from chathub_admin.dependencies import get_current_admin, get_reconciliation_engine
from chathub_admin.models.user import User
from chathub_admin.schemas.approval import (
    BatchPreview,
    CompanyCreatedResponse,
    CreateCompanyForEmailRequest,
    OperationOutcome,
)
from chathub_admin.schemas.diagnostics import DiagnosticsSnapshot
from chathub_admin.services.reconciliation import ReconciliationEngine

router = APIRouter(prefix="/admin/reconciliation", tags=["Reconciliation"])


@router.get(
    "/scan",
    response_model=DiagnosticsSnapshot,
    summary="Scan users and companies for broken links",
)
async def scan(
    engine: Annotated[ReconciliationEngine, Depends(get_reconciliation_engine)],
    admin: Annotated[User, Depends(get_current_admin)],
) -> DiagnosticsSnapshot:
    return await engine.scan()


@router.post(
    "/users/{user_id}/fix",
    response_model=CompanyCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create and link a company for an orphaned user",
)
async def fix_orphan_user(
    user_id: str,
    engine: Annotated[ReconciliationEngine, Depends(get_reconciliation_engine)],
    admin: Annotated[User, Depends(get_current_admin)],
) -> CompanyCreatedResponse:
    try:
        company_id = await engine.fix_orphan_user(user_id, actor_id=admin.id)
    except UserNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return CompanyCreatedResponse(company_id=company_id)


@router.post(
    "/fix-all",
    response_model=OperationOutcome,
    summary="Fix every orphaned user from the last scan",
)
async def fix_all_orphans(
    engine: Annotated[ReconciliationEngine, Depends(get_reconciliation_engine)],
    admin: Annotated[User, Depends(get_current_admin)],
) -> OperationOutcome:
    result = await engine.fix_all_orphans(actor_id=admin.id)
    return OperationOutcome.from_batch(result, "users")


@router.post(
    "/orphan-companies/delete",
    response_model=Union[BatchPreview, OperationOutcome],
    summary="Delete every orphaned company from the last scan",
)
async def delete_orphan_companies(
    engine: Annotated[ReconciliationEngine, Depends(get_reconciliation_engine)],
    admin: Annotated[User, Depends(get_current_admin)],
    dry_run: bool = Query(default=False),
) -> Union[BatchPreview, OperationOutcome]:
    result = await engine.delete_orphan_companies(actor_id=admin.id, dry_run=dry_run)
    if isinstance(result, BatchPreview):
        return result
    return OperationOutcome.from_batch(result, "companies")


@router.post(
    "/companies",
    response_model=CompanyCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a company for the user with this email",
)
async def create_company_for_email(
    body: CreateCompanyForEmailRequest,
    engine: Annotated[ReconciliationEngine, Depends(get_reconciliation_engine)],
    admin: Annotated[User, Depends(get_current_admin)],
) -> CompanyCreatedResponse:
    try:
        company_id = await engine.create_company_for_email(body.email, actor_id=admin.id)
    except UserNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No user with email '{body.email}'",
        )
    except CompanyAlreadyExists as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return CompanyCreatedResponse(company_id=company_id)


@router.post(
    "/missing-status/fix",
    response_model=OperationOutcome,
    summary="Set pending on companies that have no approval status",
)
async def fix_missing_status(
    engine: Annotated[ReconciliationEngine, Depends(get_reconciliation_engine)],
    admin: Annotated[User, Depends(get_current_admin)],
) -> OperationOutcome:
    result = await engine.fix_missing_approval_status(actor_id=admin.id)
    return OperationOutcome.from_batch(result, "companies")
