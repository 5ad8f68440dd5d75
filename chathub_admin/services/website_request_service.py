"""
services/website_request_service.py
-----------------------------------
Intake and review of website-build requests.

Feature ids come from a closed catalogue; each entry carries its display
icon and a fixed price used for the estimated cost. Unknown feature ids are
kept on the request but contribute nothing to the estimate.
"""

from dataclasses import dataclass
from enum import Enum as PyEnum
from typing import Iterable, Optional

from slugify import slugify

from chathub_admin.core.exceptions import WebsiteRequestNotFound
from chathub_admin.core.logging import get_logger
from chathub_admin.db.base import utcnow
from chathub_admin.db.record_store import RecordStore
from chathub_admin.models.website_request import WebsiteRequest, WebsiteRequestStatus
from chathub_admin.schemas.website_request import (
    ProjectDetailExport,
    WebsiteRequestCreate,
    WebsiteRequestStatusUpdate,
)
from chathub_admin.services.audit import AuditTrail

logger = get_logger(__name__)


class FeatureIcon(str, PyEnum):
    settings = "settings"
    lock = "lock"
    globe = "globe"
    credit_card = "credit-card"
    file_text = "file-text"
    blog = "blog"
    contact = "contact"
    calendar = "calendar"
    bar_chart = "bar-chart"
    search = "search"
    share = "share"
    languages = "languages"
    database = "database"
    smartphone = "smartphone"


@dataclass(frozen=True)
class FeatureOption:
    id: str
    name: str
    category: str
    icon: FeatureIcon
    cost: int


FEATURE_CATALOGUE: dict[str, FeatureOption] = {
    option.id: option
    for option in (
        FeatureOption("responsive-design", "Responsive Design", "Core", FeatureIcon.settings, 500),
        FeatureOption("user-auth", "User Authentication", "Core", FeatureIcon.lock, 800),
        FeatureOption("admin-panel", "Admin Panel", "Core", FeatureIcon.settings, 1200),
        FeatureOption("ecommerce", "E-commerce Integration", "E-commerce", FeatureIcon.globe, 2500),
        FeatureOption("payment-processing", "Payment Processing", "E-commerce", FeatureIcon.credit_card, 1500),
        FeatureOption("cms", "Content Management", "Content", FeatureIcon.file_text, 1000),
        FeatureOption("blog", "Blog/News Section", "Content", FeatureIcon.blog, 800),
        FeatureOption("contact-forms", "Contact Forms", "Communication", FeatureIcon.contact, 300),
        FeatureOption("appointment-booking", "Appointment Booking", "Communication", FeatureIcon.calendar, 1500),
        FeatureOption("analytics", "Analytics Dashboard", "Analytics", FeatureIcon.bar_chart, 600),
        FeatureOption("seo", "SEO Optimization", "Analytics", FeatureIcon.search, 400),
        FeatureOption("social-media", "Social Media Integration", "Advanced", FeatureIcon.share, 500),
        FeatureOption("multi-language", "Multi-language Support", "Advanced", FeatureIcon.languages, 1200),
        FeatureOption("api-integration", "API Integration", "Advanced", FeatureIcon.database, 1500),
        FeatureOption("mobile-app", "Mobile App", "Advanced", FeatureIcon.smartphone, 5000),
    )
}


def estimate_cost(feature_ids: Iterable[str]) -> int:
    return sum(
        FEATURE_CATALOGUE[fid].cost for fid in set(feature_ids) if fid in FEATURE_CATALOGUE
    )


class WebsiteRequestService:

    def __init__(self, store: RecordStore, audit: AuditTrail) -> None:
        self._store = store
        self._audit = audit

    async def submit(self, data: WebsiteRequestCreate, user_id: Optional[str] = None) -> str:
        doc = data.model_dump()
        doc.update(
            status=WebsiteRequestStatus.pending,
            estimated_cost=estimate_cost(data.features),
            submitted_at=utcnow(),
            user_id=user_id,
        )
        request_id = await self._store.create("website_requests", doc)
        logger.info(
            "Website request submitted",
            request_id=request_id,
            features=len(data.features),
            estimated_cost=doc["estimated_cost"],
        )
        return request_id

    async def get(self, request_id: str) -> WebsiteRequest:
        request = await self._store.get("website_requests", request_id)
        if request is None:
            raise WebsiteRequestNotFound(request_id)
        return request

    async def list_requests(
        self, status: Optional[WebsiteRequestStatus] = None
    ) -> list[WebsiteRequest]:
        filters = {"status": status} if status is not None else None
        return await self._store.list(
            "website_requests", filters=filters, order_by="submitted_at"
        )

    async def update_status(
        self,
        request_id: str,
        update: WebsiteRequestStatusUpdate,
        reviewer_id: Optional[str] = None,
    ) -> WebsiteRequest:
        now = utcnow()
        patch = {
            "status": update.status,
            "reviewed_at": now,
            "reviewed_by": reviewer_id,
        }
        if update.admin_notes is not None:
            patch["admin_notes"] = update.admin_notes
        if update.assigned_to is not None:
            patch["assigned_to"] = update.assigned_to
        if update.status is WebsiteRequestStatus.approved:
            patch["approved_at"] = now
        elif update.status is WebsiteRequestStatus.completed:
            patch["completed_at"] = now

        await self.get(request_id)
        await self._store.update("website_requests", request_id, patch)
        await self._audit.record(
            "update_website_request",
            reviewer_id,
            request_id=request_id,
            status=update.status.value,
        )
        return await self.get(request_id)

    @staticmethod
    def export_project_detail(request: WebsiteRequest) -> tuple[str, str]:
        """Return (filename, json body) for the project-detail download."""
        document = ProjectDetailExport(
            project_name=request.project_name,
            description=request.description,
            business_type=request.business_type,
            features=list(request.features or []),
            timeline=request.timeline or "",
            budget=request.budget or "",
            status=WebsiteRequestStatus(request.status),
            submitted_at=request.submitted_at,
            estimated_cost=estimate_cost(request.features or []),
        )
        slug = slugify(request.project_name) or "project"
        return f"{slug}-details.json", document.model_dump_json(by_alias=True, indent=2)
