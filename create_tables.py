"""
create_tables.py
----------------
Create the admin backend's tables (users, companies, deleted_companies,
audit_log, website_requests) in the database named by DATABASE_URL.
Existing tables are left untouched. For schema changes, use Alembic.

Usage:
    python create_tables.py
"""

import asyncio

from chathub_admin.core.config import settings
from chathub_admin.db.record_store import COLLECTIONS
from chathub_admin.db.session import build_engine
from chathub_admin.models import Base  # Imports all models so metadata is populated


async def create_all_tables() -> None:
    engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    finally:
        await engine.dispose()
    print(f"Record store ready: {', '.join(sorted(COLLECTIONS))}")


if __name__ == "__main__":
    asyncio.run(create_all_tables())
