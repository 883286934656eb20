"""
sessionguard.db.repositories.users

Repository for `User` entities.

Responsibilities:
- Build users (the only place `is_system_root` is decided) and look them up.
- Maintain the denormalized `roles` map.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sessionguard.db.models import ROOT_USERNAME, User


def _as_uuid(value: uuid.UUID | str) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @staticmethod
    def build(*, username: str, password_hash: str, email: str) -> User:
        # Unsaved instance; provisioning flushes several of these together.
        return User(
            username=username,
            password_hash=password_hash,
            email=email.lower(),
            is_active=True,
            is_system_root=username == ROOT_USERNAME,
            roles={},
        )

    async def get(self, user_id: uuid.UUID | str) -> User | None:
        # Session records hold the id as text; a malformed one simply does not resolve.
        key = _as_uuid(user_id)
        if key is None:
            return None
        return await self._session.get(User, key)

    async def get_by_username(self, username: str) -> User | None:
        stmt = select(User).where(User.username == username)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def set_role(self, user_id: uuid.UUID, role: str, ref: dict[str, Any]) -> User | None:
        user = await self.get(user_id)
        if user is None:
            return None
        # Reassign instead of mutating so the JSON column is marked dirty.
        user.roles = {**user.roles, role: dict(ref)}
        await self._session.flush()
        return user
