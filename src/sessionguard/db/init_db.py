"""
sessionguard.db.init_db

DB initialization helpers (dev/test convenience).

Responsibilities:
- Create tables for local development, tests and the seed command.
- Keep production migration workflow separate (Alembic).
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from sessionguard.db import models  # noqa: F401  # registers tables on Base.metadata
from sessionguard.db.base import Base


async def init_db(engine: AsyncEngine) -> None:
    """
    Dev/test bootstrap: create tables if they don't exist.
    """

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db(engine: AsyncEngine) -> None:
    # Test teardown: the equivalent of wiping every collection between suites.
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
