"""
schemas/company.py
------------------
Pydantic response models for companies and users.

Naming convention:
  CompanyRead          → full company record
  CompanyApprovalRead  → the subset shown in approval queues
  UserRead             → user record (no identity-provider internals)
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from chathub_admin.models.company import ApprovalStatus


class _ApprovalStatusField(BaseModel):
    approval_status: ApprovalStatus

    @field_validator("approval_status", mode="before")
    @classmethod
    def missing_status_is_unknown(cls, v):
        if isinstance(v, ApprovalStatus):
            return v
        return ApprovalStatus.from_stored(v)


class CompanyApprovalRead(_ApprovalStatusField):
    id: str
    company_name: str
    email: str
    phone: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None
    employee_count: Optional[str] = None
    domain: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class CompanyRead(_ApprovalStatusField):
    id: str
    company_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None
    employee_count: Optional[str] = None
    domain: Optional[str] = None
    description: Optional[str] = None
    user_id: Optional[str] = None
    status: str
    subscription: dict
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    is_synthetic: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserRead(_ApprovalStatusField):
    id: str
    email: str
    display_name: Optional[str] = None
    company_name: Optional[str] = None
    company_id: Optional[str] = None
    is_admin: bool = False
    created_at: datetime

    model_config = {"from_attributes": True}
