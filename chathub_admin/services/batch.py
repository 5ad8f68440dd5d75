"""
services/batch.py
-----------------
Concurrent fan-out for bulk approval / reconciliation writes.

All per-record actions are dispatched at once (bounded by
BATCH_MAX_CONCURRENCY) and joined before returning. A failing record is
logged and counted; it never cancels its siblings and is never raised to
the caller.
"""

import asyncio
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

from chathub_admin.core.config import settings
from chathub_admin.core.logging import get_logger
from chathub_admin.schemas.approval import BatchResult

logger = get_logger(__name__)

T = TypeVar("T")


async def run_batch(
    action: str,
    items: Sequence[T],
    worker: Callable[[T], Awaitable[object]],
    key: Callable[[T], str] = str,
    concurrency: Optional[int] = None,
) -> BatchResult:
    semaphore = asyncio.Semaphore(concurrency or settings.BATCH_MAX_CONCURRENCY)

    async def _run(item: T) -> object:
        async with semaphore:
            return await worker(item)

    outcomes = await asyncio.gather(*(_run(item) for item in items), return_exceptions=True)

    failed = 0
    for item, outcome in zip(items, outcomes):
        if isinstance(outcome, BaseException):
            failed += 1
            logger.warning(
                "Batch item failed",
                batch=action,
                item=key(item),
                error=str(outcome) or type(outcome).__name__,
            )

    result = BatchResult(
        action=action,
        total=len(items),
        succeeded=len(items) - failed,
        failed=failed,
    )
    logger.info(
        "Batch completed",
        batch=action,
        total=result.total,
        succeeded=result.succeeded,
        failed=result.failed,
    )
    return result
