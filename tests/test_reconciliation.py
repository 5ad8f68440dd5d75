"""
Unit tests for orphan detection and repair
"""

import pytest

from chathub_admin.core.exceptions import CompanyAlreadyExists, UserNotFound
from chathub_admin.models import ApprovalStatus, User
from chathub_admin.schemas.approval import BatchPreview
from chathub_admin.services.reconciliation import placeholder_company_name


@pytest.fixture
def scenario(seed):
    """
    alice  → no company (orphaned user)
    bob    ↔ Bob & Co
    Ghost Co points at a user that does not exist
    Loose Co points at nobody
    """

    async def _build():
        alice = await seed.user("alice@example.com")
        bob = await seed.user("bob@example.com", approval_status=ApprovalStatus.approved)
        bob_co = await seed.company("Bob & Co", "bob@example.com", ApprovalStatus.approved, user_id=bob)
        ghost_co = await seed.company("Ghost Co", "ghost@example.com", user_id="u-deleted")
        loose_co = await seed.company("Loose Co", "loose@example.com", approval_status=None)
        return {"alice": alice, "bob": bob, "bob_co": bob_co, "ghost_co": ghost_co, "loose_co": loose_co}

    return _build


@pytest.mark.asyncio
async def test_scan_finds_orphans_both_ways(reconciliation, scenario):
    ids = await scenario()

    snapshot = await reconciliation.scan()

    assert snapshot.orphaned_user_ids == [ids["alice"]]
    assert sorted(snapshot.orphaned_company_ids) == sorted([ids["ghost_co"], ids["loose_co"]])
    assert [c.id for c in snapshot.companies_missing_status] == [ids["loose_co"]]
    assert snapshot.companies.total == 3
    assert snapshot.companies.approved == 1
    assert snapshot.companies.pending == 1
    assert snapshot.companies.unknown == 1
    assert snapshot.users.total == 2
    assert reconciliation.last_snapshot is snapshot


@pytest.mark.asyncio
async def test_scan_is_read_only_and_repeatable(reconciliation, scenario, audit):
    await scenario()

    first = await reconciliation.scan()
    second = await reconciliation.scan()

    assert first.orphaned_user_ids == second.orphaned_user_ids
    assert sorted(first.orphaned_company_ids) == sorted(second.orphaned_company_ids)
    assert await audit.entries() == []


@pytest.mark.asyncio
async def test_fix_orphan_user_creates_and_links_company(reconciliation, store, scenario, audit):
    ids = await scenario()

    company_id = await reconciliation.fix_orphan_user(ids["alice"], actor_id="admin-1")

    company = await store.get("companies", company_id)
    user = await store.get("users", ids["alice"])
    assert company.company_name == "Company for alice"
    assert company.email == "alice@example.com"
    assert company.user_id == ids["alice"]
    assert company.approval_status == "pending"
    assert company.status == "inactive"
    assert company.subscription == {"plan": "Free", "status": "pending"}
    assert user.company_id == company_id
    assert user.approval_status == "pending"
    assert len(await audit.entries("fix_orphan_user")) == 1

    snapshot = await reconciliation.scan()
    assert snapshot.orphaned_user_ids == []


@pytest.mark.asyncio
async def test_fix_orphan_user_prefers_the_users_company_name(reconciliation, store, seed):
    user_id = await seed.user("carol@example.com", company_name="Carol Consulting")

    company_id = await reconciliation.fix_orphan_user(user_id)

    assert (await store.get("companies", company_id)).company_name == "Carol Consulting"


@pytest.mark.asyncio
async def test_fix_orphan_user_missing(reconciliation):
    with pytest.raises(UserNotFound):
        await reconciliation.fix_orphan_user("ghost")


@pytest.mark.asyncio
async def test_fix_all_orphans_uses_last_scan(reconciliation, seed, audit):
    users = [await seed.user(f"user{i}@example.com") for i in range(3)]
    await reconciliation.scan()

    result = await reconciliation.fix_all_orphans(actor_id="admin-1")

    assert (result.total, result.succeeded, result.failed) == (3, 3, 0)
    assert reconciliation.last_snapshot is None
    snapshot = await reconciliation.scan()
    assert not set(users) & set(snapshot.orphaned_user_ids)
    entries = await audit.entries("fix_all_orphans")
    assert entries[0].affected_count == 3


@pytest.mark.asyncio
async def test_fix_all_orphans_without_prior_scan(reconciliation, seed):
    await seed.user("solo@example.com")

    result = await reconciliation.fix_all_orphans()

    assert result.succeeded == 1


@pytest.mark.asyncio
async def test_delete_orphan_companies_preview_then_delete(reconciliation, store, scenario):
    ids = await scenario()
    await reconciliation.scan()

    preview = await reconciliation.delete_orphan_companies(dry_run=True)

    assert isinstance(preview, BatchPreview)
    assert preview.count == 2
    assert await store.get("companies", ids["ghost_co"]) is not None

    result = await reconciliation.delete_orphan_companies(actor_id="admin-1")

    assert result.succeeded == 2
    assert await store.get("companies", ids["ghost_co"]) is None
    assert await store.get("companies", ids["loose_co"]) is None
    assert await store.get("companies", ids["bob_co"]) is not None


@pytest.mark.asyncio
async def test_create_company_for_email(reconciliation, store, seed):
    user_id = await seed.user("dave@example.com")

    company_id = await reconciliation.create_company_for_email("dave@example.com", actor_id="admin-1")

    assert (await store.get("users", user_id)).company_id == company_id


@pytest.mark.asyncio
async def test_create_company_for_unknown_email(reconciliation):
    with pytest.raises(UserNotFound):
        await reconciliation.create_company_for_email("nobody@example.com")


@pytest.mark.asyncio
async def test_create_company_for_linked_user(reconciliation, store, seed):
    await seed.user("erin@example.com", company_id="c-existing")

    with pytest.raises(CompanyAlreadyExists):
        await reconciliation.create_company_for_email("erin@example.com")

    assert await store.list("companies") == []


@pytest.mark.asyncio
async def test_fix_missing_approval_status(reconciliation, store, scenario):
    ids = await scenario()

    result = await reconciliation.fix_missing_approval_status(actor_id="admin-1")

    assert result.succeeded == 1
    assert (await store.get("companies", ids["loose_co"])).approval_status == "pending"
    snapshot = await reconciliation.scan()
    assert snapshot.companies_missing_status == []


def test_placeholder_company_name():
    assert placeholder_company_name(User(email="frank@example.com")) == "Company for frank"
    assert placeholder_company_name(User(email="@example.com")) == "Company for User"


@pytest.mark.asyncio
async def test_blank_status_is_reported_and_repaired(reconciliation, store, seed):
    blank = await seed.company("Blank Co", approval_status="")

    snapshot = await reconciliation.scan()
    assert [c.id for c in snapshot.companies_missing_status] == [blank]

    result = await reconciliation.fix_missing_approval_status()

    assert (result.total, result.succeeded) == (1, 1)
    assert (await store.get("companies", blank)).approval_status == "pending"
    assert (await reconciliation.scan()).companies_missing_status == []


@pytest.mark.asyncio
async def test_fix_all_orphans_tolerates_a_vanished_user(reconciliation, store, seed):
    """A user removed after the scan fails alone; the rest are fixed"""
    kept = await seed.user("kept@example.com")
    gone = await seed.user("gone@example.com")
    await reconciliation.scan()
    await store.delete("users", gone)

    result = await reconciliation.fix_all_orphans(actor_id="admin-1")

    assert (result.total, result.succeeded, result.failed) == (2, 1, 1)
    assert result.success is False
    assert (await store.get("users", kept)).company_id is not None


@pytest.mark.asyncio
async def test_delete_orphan_companies_tolerates_a_vanished_company(reconciliation, store, seed):
    kept = await seed.company("Orphan A", user_id="u-deleted")
    gone = await seed.company("Orphan B", user_id="u-deleted")
    await reconciliation.scan()
    await store.delete("companies", gone)

    result = await reconciliation.delete_orphan_companies(actor_id="admin-1")

    assert (result.total, result.succeeded, result.failed) == (2, 1, 1)
    assert await store.get("companies", kept) is None
