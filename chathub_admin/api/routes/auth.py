"""
api/routes/auth.py
------------------
Authentication endpoints.

GET /me — Return the authenticated admin's profile.

Tokens are minted by the identity provider (or create_access_token in
operator scripts); this service only verifies them.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from chathub_admin.dependencies import get_current_admin
from chathub_admin.models.user import User
from chathub_admin.schemas.company import UserRead

router = APIRouter(tags=["Authentication"])


@router.get(
    "/me",
    response_model=UserRead,
    summary="Get the currently authenticated admin",
)
async def get_me(
    current_user: Annotated[User, Depends(get_current_admin)],
) -> UserRead:
    return UserRead.model_validate(current_user)
