"""
run_diagnostics.py
------------------
Operator script: scan users and companies, log approval statistics and
integrity findings, and write a debug export to DIAGNOSTICS_EXPORT_DIR.

Repairs only run when asked for.

Usage:
    python run_diagnostics.py
    python run_diagnostics.py --fix-orphans --fix-missing-status
"""

import argparse
import asyncio

from chathub_admin.core.config import settings
from chathub_admin.core.logging import configure_logging, get_logger
from chathub_admin.db.record_store import RecordStore
from chathub_admin.db.session import AsyncSessionLocal, engine
from chathub_admin.models.company import ApprovalStatus
from chathub_admin.repositories.approval_repository import ApprovalRepository
from chathub_admin.services.audit import AuditTrail
from chathub_admin.services.diagnostics import DiagnosticsReporter
from chathub_admin.services.reconciliation import ReconciliationEngine

logger = get_logger(__name__)


async def run(args: argparse.Namespace) -> None:
    store = RecordStore(AsyncSessionLocal)
    repository = ApprovalRepository(store)
    reconciliation = ReconciliationEngine(store, repository, AuditTrail(store))
    reporter = DiagnosticsReporter(args.export_dir)

    try:
        snapshot = await reconciliation.scan()
        stats = reporter.compute_statistics(snapshot)
        logger.info("Approval statistics", **stats.model_dump())
        for issue in reporter.validate_integrity(snapshot):
            logger.warning("Integrity issue", kind=issue.kind.value, record_id=issue.record_id, message=issue.message)

        await repository.refresh()
        path = reporter.export_snapshot(
            snapshot,
            approvals=repository.visible(ApprovalStatus.pending),
            approved=repository.visible(ApprovalStatus.approved),
            denied=repository.visible(ApprovalStatus.rejected),
        )
        print(f"Export written to {path}")

        if args.fix_orphans:
            result = await reconciliation.fix_all_orphans(actor_id=args.actor)
            print(f"Orphaned users fixed: {result.succeeded}/{result.total}")
        if args.fix_missing_status:
            result = await reconciliation.fix_missing_approval_status(actor_id=args.actor)
            print(f"Companies given pending status: {result.succeeded}/{result.total}")
    finally:
        await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Approval data diagnostics")
    parser.add_argument("--export-dir", default=settings.DIAGNOSTICS_EXPORT_DIR)
    parser.add_argument("--fix-orphans", action="store_true", help="Create companies for orphaned users")
    parser.add_argument("--fix-missing-status", action="store_true", help="Set pending where status is missing")
    parser.add_argument("--actor", default=None, help="User id recorded in the audit log")
    args = parser.parse_args()

    configure_logging()
    asyncio.run(run(args))


if __name__ == "__main__":
    main()
