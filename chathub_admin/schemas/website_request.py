"""
schemas/website_request.py
--------------------------
Pydantic models for website-build request intake, review and export.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from chathub_admin.models.website_request import WebsiteRequestStatus


class WebsiteRequestCreate(BaseModel):
    project_name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    business_type: str = Field(..., min_length=1, max_length=120)
    contact_email: EmailStr
    target_audience: str = ""
    features: list[str] = []
    timeline: str = ""
    budget: str = ""
    phone_number: str = ""
    additional_notes: str = ""
    project_type: str = ""
    priority: str = ""

    @field_validator("project_name", "description", "business_type")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class WebsiteRequestStatusUpdate(BaseModel):
    status: WebsiteRequestStatus
    admin_notes: Optional[str] = None
    assigned_to: Optional[str] = None


class WebsiteRequestRead(BaseModel):
    id: str
    project_name: str
    description: str
    business_type: str
    target_audience: str
    features: list[str]
    timeline: str
    budget: str
    contact_email: str
    phone_number: str
    project_type: str
    priority: str
    status: WebsiteRequestStatus
    estimated_cost: int
    submitted_at: datetime
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    admin_notes: Optional[str] = None
    assigned_to: Optional[str] = None

    model_config = {"from_attributes": True}


class WebsiteRequestCreated(BaseModel):
    request_id: str
    estimated_cost: int


class ProjectDetailExport(BaseModel):
    """Downloadable project summary; keys are camelCase in the file."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    project_name: str
    description: str
    business_type: str
    features: list[str]
    timeline: str
    budget: str
    status: WebsiteRequestStatus
    submitted_at: datetime
    estimated_cost: int
