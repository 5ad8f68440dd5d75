"""
models/user.py
--------------
User ORM model.

Users are created at signup by the identity provider. company_id is a soft
link to companies.id; the reconciliation engine attaches it when a user
has no company. approval_status mirrors the linked company's status.
"""

import uuid
from typing import Optional

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from chathub_admin.db.base import Base, TimestampMixin
from chathub_admin.models.company import ApprovalStatus


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    display_name: Mapped[Optional[str]] = mapped_column(String(255))
    company_name: Mapped[Optional[str]] = mapped_column(String(255))
    company_id: Mapped[Optional[str]] = mapped_column(String(36), index=True)
    approval_status: Mapped[Optional[str]] = mapped_column(String(20))
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    @property
    def effective_approval_status(self) -> ApprovalStatus:
        return ApprovalStatus.from_stored(self.approval_status)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email} company_id={self.company_id}>"
