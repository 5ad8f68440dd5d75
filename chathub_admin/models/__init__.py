"""
models/__init__.py
------------------
Re-export all models so create_tables.py can import Base and discover
all tables via a single import:

    from chathub_admin.models import Base
"""

from chathub_admin.db.base import Base
from chathub_admin.models.audit_log import AuditLogEntry
from chathub_admin.models.company import ApprovalStatus, Company, CompanyStatus
from chathub_admin.models.deleted_company import DeletedCompany
from chathub_admin.models.user import User
from chathub_admin.models.website_request import WebsiteRequest, WebsiteRequestStatus

__all__ = [
    "Base",
    "ApprovalStatus",
    "AuditLogEntry",
    "Company",
    "CompanyStatus",
    "DeletedCompany",
    "User",
    "WebsiteRequest",
    "WebsiteRequestStatus",
]
