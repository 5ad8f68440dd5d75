"""
services/audit.py
-----------------
Audit trail for approval and reconciliation actions.

Entries are written after the action they describe. A failed audit write
propagates: an operator must never see "done" for a bulk action that left
no trace of who ran it.
"""

from typing import Any, Optional

from chathub_admin.core.logging import get_logger
from chathub_admin.db.record_store import RecordStore

logger = get_logger(__name__)


class AuditTrail:

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    async def record(
        self,
        action: str,
        actor_id: Optional[str],
        affected_count: int = 1,
        **details: Any,
    ) -> str:
        entry_id = await self._store.create(
            "audit_log",
            {
                "action": action,
                "actor_id": actor_id,
                "affected_count": affected_count,
                "details": details,
            },
        )
        logger.info(
            "Audit entry recorded",
            action=action,
            actor_id=actor_id,
            affected_count=affected_count,
        )
        return entry_id

    async def entries(self, action: Optional[str] = None) -> list:
        filters = {"action": action} if action else None
        return await self._store.list("audit_log", filters=filters, order_by="created_at")
