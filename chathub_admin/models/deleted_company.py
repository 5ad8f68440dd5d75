"""
models/deleted_company.py
-------------------------
Backup of a company document taken immediately before an admin delete.
payload holds every column of the deleted row so it can be restored by hand.
"""

import uuid
from typing import Optional

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from chathub_admin.db.base import Base, TimestampMixin


class DeletedCompany(Base, TimestampMixin):
    __tablename__ = "deleted_companies"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    company_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    company_name: Mapped[Optional[str]] = mapped_column(String(255))
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
    deleted_by: Mapped[Optional[str]] = mapped_column(String(36))

    def __repr__(self) -> str:
        return f"<DeletedCompany id={self.id} company_id={self.company_id}>"
