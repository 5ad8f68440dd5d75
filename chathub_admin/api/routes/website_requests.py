"""
api/routes/website_requests.py
------------------------------
Website-build request intake and management.

POST  /website-requests               — Public intake form.
GET   /website-requests               — Admin: list requests, newest first.
PATCH /website-requests/{id}/status   — Admin: move a request through review.
GET   /website-requests/{id}/export   — Admin: download project details.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from chathub_admin.core.exceptions import WebsiteRequestNotFound
from chathub_admin.dependencies import get_current_admin, get_website_request_service
from chathub_admin.models.user import User
from chathub_admin.models.website_request import WebsiteRequestStatus
from chathub_admin.schemas.website_request import (
    WebsiteRequestCreate,
    WebsiteRequestCreated,
    WebsiteRequestRead,
    WebsiteRequestStatusUpdate,
)
from chathub_admin.services.website_request_service import (
    WebsiteRequestService,
    estimate_cost,
)

router = APIRouter(prefix="/website-requests", tags=["Website requests"])


@router.post(
    "",
    response_model=WebsiteRequestCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a website-build request",
)
async def submit_request(
    body: WebsiteRequestCreate,
    service: Annotated[WebsiteRequestService, Depends(get_website_request_service)],
) -> WebsiteRequestCreated:
    """Public endpoint, no authentication required."""
    request_id = await service.submit(body)
    return WebsiteRequestCreated(request_id=request_id, estimated_cost=estimate_cost(body.features))


@router.get(
    "",
    response_model=list[WebsiteRequestRead],
    summary="List website-build requests (admin only)",
)
async def list_requests(
    service: Annotated[WebsiteRequestService, Depends(get_website_request_service)],
    admin: Annotated[User, Depends(get_current_admin)],
    request_status: Optional[WebsiteRequestStatus] = Query(default=None, alias="status"),
) -> list[WebsiteRequestRead]:
    requests = await service.list_requests(request_status)
    return [WebsiteRequestRead.model_validate(r) for r in requests]


@router.patch(
    "/{request_id}/status",
    response_model=WebsiteRequestRead,
    summary="Update the review status of a request (admin only)",
)
async def update_status(
    request_id: str,
    body: WebsiteRequestStatusUpdate,
    service: Annotated[WebsiteRequestService, Depends(get_website_request_service)],
    admin: Annotated[User, Depends(get_current_admin)],
) -> WebsiteRequestRead:
    try:
        request = await service.update_status(request_id, body, reviewer_id=admin.id)
    except WebsiteRequestNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return WebsiteRequestRead.model_validate(request)


@router.get(
    "/{request_id}/export",
    summary="Download project details as JSON (admin only)",
    response_class=Response,
)
async def export_request(
    request_id: str,
    service: Annotated[WebsiteRequestService, Depends(get_website_request_service)],
    admin: Annotated[User, Depends(get_current_admin)],
) -> Response:
    try:
        request = await service.get(request_id)
    except WebsiteRequestNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    filename, body = service.export_project_detail(request)
    return Response(
        content=body,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
