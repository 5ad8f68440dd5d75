"""
api/routes/approvals.py
-----------------------
Admin company-approval endpoints.

GET  /admin/approvals                 — Approval queue (pending by default).
POST /admin/approvals/{id}/approve    — Approve one pending company.
POST /admin/approvals/{id}/reject     — Reject one pending company.
POST /admin/approvals/approve-all     — Approve every pending company.
POST /admin/approvals/reset           — Scoped reset to pending (dry run by default).
POST /admin/approvals/test-company    — Write a synthetic company.
"""

from typing import Annotated, Union

from fastapi import APIRouter, Depends, HTTPException, Query, status

from chathub_admin.core.exceptions import CompanyNotFound, InvalidTransition
from chathub_admin.dependencies import (
    get_approval_repository,
    get_approval_workflow,
    get_current_admin,
)
from chathub_admin.models.company import ApprovalStatus
from chathub_admin.models.user import User
from chathub_admin.repositories.approval_repository import ApprovalRepository
from chathub_admin.schemas.approval import (
    BatchPreview,
    CompanyCreatedResponse,
    OperationOutcome,
    ResetScope,
)
from chathub_admin.schemas.company import CompanyApprovalRead, CompanyRead
from chathub_admin.services.approval_workflow import ApprovalWorkflow

router = APIRouter(prefix="/admin/approvals", tags=["Approvals"])


@router.get(
    "",
    response_model=list[CompanyApprovalRead],
    summary="List companies awaiting (or past) approval",
)
async def list_approvals(
    repository: Annotated[ApprovalRepository, Depends(get_approval_repository)],
    admin: Annotated[User, Depends(get_current_admin)],
    approval_status: ApprovalStatus = Query(
        default=ApprovalStatus.pending, alias="status"
    ),
) -> list[CompanyApprovalRead]:
    """
    Newest first. Companies missing a name or an email are not listed.
    Listing a stored status reloads all three dashboard queues.
    """
    if approval_status is ApprovalStatus.unknown:
        companies = await repository.list_by_status(approval_status)
    else:
        await repository.refresh()
        companies = repository.visible(approval_status)
    return [CompanyApprovalRead.model_validate(c) for c in companies]


async def _transition(action, company_id: str, admin: User) -> CompanyRead:
    try:
        company = await action(company_id, actor_id=admin.id)
    except CompanyNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except InvalidTransition as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return CompanyRead.model_validate(company)


@router.post(
    "/{company_id}/approve",
    response_model=CompanyRead,
    summary="Approve a company",
)
async def approve_company(
    company_id: str,
    workflow: Annotated[ApprovalWorkflow, Depends(get_approval_workflow)],
    admin: Annotated[User, Depends(get_current_admin)],
) -> CompanyRead:
    return await _transition(workflow.approve, company_id, admin)


@router.post(
    "/{company_id}/reject",
    response_model=CompanyRead,
    summary="Reject a company",
)
async def reject_company(
    company_id: str,
    workflow: Annotated[ApprovalWorkflow, Depends(get_approval_workflow)],
    admin: Annotated[User, Depends(get_current_admin)],
) -> CompanyRead:
    return await _transition(workflow.reject, company_id, admin)


@router.post(
    "/approve-all",
    response_model=OperationOutcome,
    summary="Approve every pending company",
)
async def approve_all_pending(
    workflow: Annotated[ApprovalWorkflow, Depends(get_approval_workflow)],
    admin: Annotated[User, Depends(get_current_admin)],
) -> OperationOutcome:
    result = await workflow.approve_all_pending(actor_id=admin.id)
    return OperationOutcome.from_batch(result, "companies")


@router.post(
    "/reset",
    response_model=Union[BatchPreview, OperationOutcome],
    summary="Reset selected companies to pending",
)
async def reset_to_pending(
    scope: ResetScope,
    workflow: Annotated[ApprovalWorkflow, Depends(get_approval_workflow)],
    admin: Annotated[User, Depends(get_current_admin)],
    dry_run: bool = Query(default=True, description="Only report what would change"),
) -> Union[BatchPreview, OperationOutcome]:
    """
    The body must name the companies to reset. Send all_companies=true to
    reset the whole table. Nothing is written unless dry_run=false.
    """
    result = await workflow.reset_to_pending(scope, actor_id=admin.id, dry_run=dry_run)
    if isinstance(result, BatchPreview):
        return result
    return OperationOutcome.from_batch(result, "companies")


@router.post(
    "/test-company",
    response_model=CompanyCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a synthetic company to check the write path",
)
async def create_test_company(
    workflow: Annotated[ApprovalWorkflow, Depends(get_approval_workflow)],
    admin: Annotated[User, Depends(get_current_admin)],
) -> CompanyCreatedResponse:
    company_id = await workflow.test_harness.create_synthetic_company(actor_id=admin.id)
    return CompanyCreatedResponse(company_id=company_id)
