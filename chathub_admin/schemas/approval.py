"""
schemas/approval.py
-------------------
Request bodies and aggregate results for approval and reconciliation actions.

Batch results are deliberately aggregate: callers learn how many records
failed, never which ones (those are in the logs).
"""

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from chathub_admin.models.company import ApprovalStatus


class ResetScope(BaseModel):
    """
    Which companies a reset touches. At least one selector is required;
    resetting the whole table needs all_companies=True spelled out.
    """
    company_ids: Optional[list[str]] = None
    approval_status: Optional[ApprovalStatus] = None
    all_companies: bool = False

    @model_validator(mode="after")
    def require_explicit_scope(self) -> "ResetScope":
        if not self.all_companies and self.company_ids is None and self.approval_status is None:
            raise ValueError(
                "Specify company_ids, approval_status, or all_companies=true"
            )
        if self.company_ids is not None and not self.company_ids:
            raise ValueError("company_ids must not be empty")
        return self


class BatchResult(BaseModel):
    action: str
    total: int
    succeeded: int
    failed: int

    @property
    def success(self) -> bool:
        return self.failed == 0


class BatchPreview(BaseModel):
    action: str
    dry_run: bool = True
    count: int
    record_ids: list[str]


class OperationOutcome(BaseModel):
    """What the dashboard shows in its notification toast."""
    success: bool
    message: str
    total: int = 0
    succeeded: int = 0
    failed: int = 0

    @classmethod
    def from_batch(cls, result: BatchResult, noun: str) -> "OperationOutcome":
        if result.success:
            message = f"{result.succeeded} {noun} updated"
        else:
            message = f"{result.succeeded} of {result.total} {noun} updated, {result.failed} failed"
        return cls(
            success=result.success,
            message=message,
            total=result.total,
            succeeded=result.succeeded,
            failed=result.failed,
        )


class DeleteCompanyRequest(BaseModel):
    confirmation: str = Field(
        ...,
        description="Must exactly match the company name",
    )


class DeleteCompanyResponse(BaseModel):
    company_id: str
    backup_id: str


class CreateCompanyForEmailRequest(BaseModel):
    """Exact-match lookup of a stored user, so the address is not re-validated."""
    email: str = Field(..., min_length=1)


class CompanyCreatedResponse(BaseModel):
    company_id: str
