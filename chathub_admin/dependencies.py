"""
dependencies.py
---------------
FastAPI dependency injection for the store, the approval services, and
admin authentication.

Service wiring:
  The RecordStore, ApprovalRepository and ReconciliationEngine are process
  singletons. The repository's display cache and the engine's last scan
  must survive between requests so "fix all" acts on the scan the operator
  just looked at. Tests replace get_record_store via
  app.dependency_overrides and everything built on it follows.

Auth flow:
  1. HTTPBearer extracts the Bearer token from the Authorization header.
  2. decode_access_token validates and parses the JWT (no store round-trip).
  3. The role claim must be 'admin'.
  4. The user is re-loaded through the store and must still be flagged
     is_admin, so demoted or deleted admins are rejected.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from chathub_admin.core.config import settings
from chathub_admin.core.logging import get_logger
from chathub_admin.core.security import ADMIN_ROLE, decode_access_token
from chathub_admin.db.record_store import RecordStore
from chathub_admin.db.session import AsyncSessionLocal
from chathub_admin.models.user import User
from chathub_admin.repositories.approval_repository import ApprovalRepository
from chathub_admin.services.approval_workflow import ApprovalWorkflow
from chathub_admin.services.audit import AuditTrail
from chathub_admin.services.diagnostics import DiagnosticsReporter
from chathub_admin.services.reconciliation import ReconciliationEngine
from chathub_admin.services.website_request_service import WebsiteRequestService

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)


# ── Services ──────────────────────────────────────────────────────────────────

def get_record_store() -> RecordStore:
    return _default_store()


@lru_cache()
def _default_store() -> RecordStore:
    return RecordStore(AsyncSessionLocal)


@lru_cache()
def _repository_for(store: RecordStore) -> ApprovalRepository:
    return ApprovalRepository(store)


@lru_cache()
def _engine_for(store: RecordStore) -> ReconciliationEngine:
    return ReconciliationEngine(store, _repository_for(store), AuditTrail(store))


def get_audit_trail(
    store: Annotated[RecordStore, Depends(get_record_store)],
) -> AuditTrail:
    return AuditTrail(store)


def get_approval_repository(
    store: Annotated[RecordStore, Depends(get_record_store)],
) -> ApprovalRepository:
    return _repository_for(store)


def get_reconciliation_engine(
    store: Annotated[RecordStore, Depends(get_record_store)],
) -> ReconciliationEngine:
    return _engine_for(store)


def get_approval_workflow(
    store: Annotated[RecordStore, Depends(get_record_store)],
    repository: Annotated[ApprovalRepository, Depends(get_approval_repository)],
    audit: Annotated[AuditTrail, Depends(get_audit_trail)],
) -> ApprovalWorkflow:
    return ApprovalWorkflow(repository, store, audit)


def get_diagnostics_reporter() -> DiagnosticsReporter:
    return DiagnosticsReporter(settings.DIAGNOSTICS_EXPORT_DIR)


def get_website_request_service(
    store: Annotated[RecordStore, Depends(get_record_store)],
    audit: Annotated[AuditTrail, Depends(get_audit_trail)],
) -> WebsiteRequestService:
    return WebsiteRequestService(store, audit)


# ── Auth ──────────────────────────────────────────────────────────────────────

async def get_current_admin(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    store: Annotated[RecordStore, Depends(get_record_store)],
) -> User:
    """
    Decode the JWT, then load and return the admin User from the store.
    Raises 401 for a bad token or unknown user, 403 for a non-admin.
    """
    if credentials is None:
        raise _CREDENTIALS_EXCEPTION
    try:
        payload = decode_access_token(credentials.credentials)
        user_id = payload.get("sub")
        role = payload.get("role")
        if not user_id:
            raise _CREDENTIALS_EXCEPTION
    except JWTError as exc:
        logger.warning("JWT decode failed", error=str(exc))
        raise _CREDENTIALS_EXCEPTION

    if role != ADMIN_ROLE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )

    # Always re-verify against the store so revoked admins are rejected
    user = await store.get("users", user_id)
    if user is None:
        logger.warning("User from valid JWT not found in store", user_id=user_id)
        raise _CREDENTIALS_EXCEPTION
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return user
