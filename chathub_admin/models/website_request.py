"""
models/website_request.py
-------------------------
Website-build request submitted from the public intake form and worked
through by admins.
"""

import uuid
from datetime import datetime
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import JSON, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from chathub_admin.db.base import Base, TimestampMixin, utcnow


class WebsiteRequestStatus(str, PyEnum):
    pending = "pending"
    reviewing = "reviewing"
    approved = "approved"
    rejected = "rejected"
    in_progress = "in-progress"
    completed = "completed"


class WebsiteRequest(Base, TimestampMixin):
    __tablename__ = "website_requests"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    project_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    business_type: Mapped[str] = mapped_column(String(120), nullable=False)
    target_audience: Mapped[str] = mapped_column(String(255), default="")
    features: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    timeline: Mapped[str] = mapped_column(String(120), default="")
    budget: Mapped[str] = mapped_column(String(120), default="")
    contact_email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    phone_number: Mapped[str] = mapped_column(String(50), default="")
    additional_notes: Mapped[str] = mapped_column(Text, default="")
    project_type: Mapped[str] = mapped_column(String(120), default="")
    priority: Mapped[str] = mapped_column(String(20), default="")

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=WebsiteRequestStatus.pending.value, index=True
    )
    estimated_cost: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    reviewed_by: Mapped[Optional[str]] = mapped_column(String(36))
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    admin_notes: Mapped[Optional[str]] = mapped_column(Text)
    assigned_to: Mapped[Optional[str]] = mapped_column(String(255))

    user_id: Mapped[Optional[str]] = mapped_column(String(36))
    company_id: Mapped[Optional[str]] = mapped_column(String(36))

    def __repr__(self) -> str:
        return f"<WebsiteRequest id={self.id} project={self.project_name} status={self.status}>"
