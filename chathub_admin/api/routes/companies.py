"""
api/routes/companies.py
-----------------------
Admin company management.

POST   /admin/companies/clear — Scoped bulk delete (dry run by default).
GET    /admin/companies/{id}  — Full company record.
DELETE /admin/companies/{id}  — Delete after typed-name confirmation; a
                                backup is written to deleted_companies first.
"""

from typing import Annotated, Union

from fastapi import APIRouter, Depends, HTTPException, Query, status

from chathub_admin.core.exceptions import CompanyNotFound, ValidationFailure
from chathub_admin.dependencies import (
    get_approval_repository,
    get_approval_workflow,
    get_current_admin,
)
from chathub_admin.models.user import User
from chathub_admin.repositories.approval_repository import ApprovalRepository
from chathub_admin.schemas.approval import (
    BatchPreview,
    DeleteCompanyRequest,
    DeleteCompanyResponse,
    OperationOutcome,
    ResetScope,
)
from chathub_admin.schemas.company import CompanyRead
from chathub_admin.services.approval_workflow import ApprovalWorkflow

router = APIRouter(prefix="/admin/companies", tags=["Companies"])


@router.post(
    "/clear",
    response_model=Union[BatchPreview, OperationOutcome],
    summary="Delete the selected companies (backups are kept)",
)
async def clear_companies(
    scope: ResetScope,
    workflow: Annotated[ApprovalWorkflow, Depends(get_approval_workflow)],
    admin: Annotated[User, Depends(get_current_admin)],
    dry_run: bool = Query(default=True, description="Only report what would be deleted"),
) -> Union[BatchPreview, OperationOutcome]:
    result = await workflow.clear_companies(scope, actor_id=admin.id, dry_run=dry_run)
    if isinstance(result, BatchPreview):
        return result
    return OperationOutcome.from_batch(result, "companies")


@router.get(
    "/{company_id}",
    response_model=CompanyRead,
    summary="Get a company",
)
async def get_company(
    company_id: str,
    repository: Annotated[ApprovalRepository, Depends(get_approval_repository)],
    admin: Annotated[User, Depends(get_current_admin)],
) -> CompanyRead:
    try:
        company = await repository.get_company(company_id)
    except CompanyNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return CompanyRead.model_validate(company)


@router.delete(
    "/{company_id}",
    response_model=DeleteCompanyResponse,
    summary="Delete a company (backup is kept)",
)
async def delete_company(
    company_id: str,
    body: DeleteCompanyRequest,
    repository: Annotated[ApprovalRepository, Depends(get_approval_repository)],
    workflow: Annotated[ApprovalWorkflow, Depends(get_approval_workflow)],
    admin: Annotated[User, Depends(get_current_admin)],
) -> DeleteCompanyResponse:
    """
    The confirmation text must equal the company name exactly, including
    case and surrounding whitespace.
    """
    try:
        company = await repository.get_company(company_id)
        backup_id = await workflow.delete_company(company, body.confirmation, actor_id=admin.id)
    except CompanyNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except ValidationFailure as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    return DeleteCompanyResponse(company_id=company_id, backup_id=backup_id)
