"""
models/company.py
-----------------
Company (tenant) ORM model and its approval state machine.

approval_status is the onboarding gate; status is the operational state and
changes independently of approval history. approval_status is nullable in
storage because older records were written without it; readers go through
Company.effective_approval_status, which reports ApprovalStatus.unknown for
those rows (and for blank or unrecognised values). unknown is never
written back.
"""

import uuid
from datetime import datetime
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import JSON, Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from chathub_admin.db.base import Base, TimestampMixin


class ApprovalStatus(str, PyEnum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    unknown = "unknown"

    @classmethod
    def stored(cls) -> tuple["ApprovalStatus", ...]:
        """Statuses that may actually be written to a record."""
        return (cls.pending, cls.approved, cls.rejected)

    @classmethod
    def from_stored(cls, value: Optional[str]) -> "ApprovalStatus":
        try:
            status = cls(value)
        except ValueError:
            return cls.unknown
        return status if status in cls.stored() else cls.unknown


class CompanyStatus(str, PyEnum):
    active = "active"
    inactive = "inactive"
    suspended = "suspended"


# Moves the facade may perform. Anything that leaves approved/rejected goes
# back through pending via the scoped reset.
_TRANSITIONS: dict[ApprovalStatus, frozenset[ApprovalStatus]] = {
    ApprovalStatus.pending: frozenset({ApprovalStatus.approved, ApprovalStatus.rejected}),
    ApprovalStatus.approved: frozenset({ApprovalStatus.pending}),
    ApprovalStatus.rejected: frozenset({ApprovalStatus.pending}),
    ApprovalStatus.unknown: frozenset({ApprovalStatus.pending}),
}


def can_transition(current: ApprovalStatus, target: ApprovalStatus) -> bool:
    if target is ApprovalStatus.unknown:
        return False
    if current is target:
        return True
    return target in _TRANSITIONS[current]


def default_subscription() -> dict:
    return {"plan": "Free", "status": "active"}


class Company(Base, TimestampMixin):
    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    company_name: Mapped[Optional[str]] = mapped_column(String(255), index=True)
    email: Mapped[Optional[str]] = mapped_column(String(320), index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    website: Mapped[Optional[str]] = mapped_column(String(255))
    industry: Mapped[Optional[str]] = mapped_column(String(120))
    employee_count: Mapped[Optional[str]] = mapped_column(String(50))
    domain: Mapped[Optional[str]] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text)

    # Soft link: users.company_id points back here, neither side is enforced.
    user_id: Mapped[Optional[str]] = mapped_column(String(36), index=True)

    # No column default: writers set pending explicitly, an absent value stays NULL.
    approval_status: Mapped[Optional[str]] = mapped_column(String(20), index=True)
    approved_by: Mapped[Optional[str]] = mapped_column(String(36))
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=CompanyStatus.active.value
    )
    subscription: Mapped[dict] = mapped_column(
        JSON, nullable=False, default=default_subscription
    )
    is_synthetic: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    @property
    def effective_approval_status(self) -> ApprovalStatus:
        return ApprovalStatus.from_stored(self.approval_status)

    @property
    def is_displayable(self) -> bool:
        """Approval lists only show records carrying both a name and an email."""
        return bool(self.company_name) and bool(self.email)

    def __repr__(self) -> str:
        return (
            f"<Company id={self.id} name={self.company_name} "
            f"approval={self.approval_status}>"
        )
