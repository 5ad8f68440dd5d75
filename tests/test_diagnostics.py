"""
Unit tests for approval statistics, integrity checks and the debug export
"""

import json
from datetime import datetime, timezone

import pytest

from chathub_admin.models import ApprovalStatus
from chathub_admin.schemas.diagnostics import DiagnosticsSnapshot, IssueKind, StatusCounts
from chathub_admin.services.diagnostics import DiagnosticsReporter, rate


def _snapshot(**counts) -> DiagnosticsSnapshot:
    return DiagnosticsSnapshot(
        scanned_at=datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc),
        users=StatusCounts(),
        companies=StatusCounts(**counts),
        orphaned_users=[],
        orphaned_companies=[],
        companies_missing_status=[],
    )


def test_rate_rounds_to_one_decimal():
    assert rate(1, 3) == 33.3
    assert rate(2, 3) == 66.7
    assert rate(0, 0) == 0
    assert rate(5, 0) == 0


def test_statistics_rates():
    stats = DiagnosticsReporter.compute_statistics(
        _snapshot(total=10, approved=6, rejected=2, pending=2)
    )

    assert stats.approval_rate == 60.0
    assert stats.rejection_rate == 20.0
    assert stats.pending_rate == 20.0


def test_statistics_on_empty_store():
    stats = DiagnosticsReporter.compute_statistics(_snapshot())

    assert stats.total == 0
    assert (stats.approval_rate, stats.rejection_rate, stats.pending_rate) == (0, 0, 0)


@pytest.mark.asyncio
async def test_integrity_reports_every_finding(reconciliation, seed):
    orphan_user = await seed.user("alice@example.com")
    ghost_co = await seed.company("Ghost Co", user_id="u-deleted")
    missing = await seed.company("Loose Co", approval_status=None)

    snapshot = await reconciliation.scan()
    issues = DiagnosticsReporter.validate_integrity(snapshot)

    found = {(i.kind, i.record_id) for i in issues}
    assert (IssueKind.orphaned_user, orphan_user) in found
    assert (IssueKind.orphaned_company, ghost_co) in found
    assert (IssueKind.orphaned_company, missing) in found
    assert (IssueKind.missing_approval_status, missing) in found
    assert len(issues) == 4


@pytest.mark.asyncio
async def test_export_document_shape(reconciliation, repository, seed, tmp_path):
    await seed.company("Pending Co")
    snapshot = await reconciliation.scan()
    await repository.refresh()
    reporter = DiagnosticsReporter(tmp_path / "exports")
    now = datetime(2026, 3, 1, 12, 30, 45, tzinfo=timezone.utc)

    filename, body = reporter.render_export(
        snapshot, approvals=repository.visible(ApprovalStatus.pending), now=now
    )

    document = json.loads(body)
    assert filename == "approval-debug-2026-03-01T12-30-45.json"
    assert set(document) == {"timestamp", "debugData", "approvals", "approvedCompanies", "deniedCompanies"}
    assert [c["company_name"] for c in document["approvals"]] == ["Pending Co"]
    assert document["approvedCompanies"] == []
    assert len(document["debugData"]["orphaned_companies"]) == 1


def test_export_snapshot_writes_file(tmp_path):
    reporter = DiagnosticsReporter(tmp_path / "exports")

    path = reporter.export_snapshot(_snapshot(total=1, pending=1))

    assert path.parent == tmp_path / "exports"
    assert json.loads(path.read_text())["debugData"]["companies"]["pending"] == 1
