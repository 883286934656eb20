"""
sessionguard.db.repositories.admins

Repository for `Admin` role holders.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from sessionguard.auth.groups import group_map
from sessionguard.db.models import Admin


class AdminRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @staticmethod
    def build(*, name: str, groups: Iterable[str] = ()) -> Admin:
        return Admin(name=name, groups=group_map(groups), user=None)

    async def get(self, admin_id: uuid.UUID | str) -> Admin | None:
        if isinstance(admin_id, str):
            try:
                admin_id = uuid.UUID(admin_id)
            except ValueError:
                return None
        return await self._session.get(Admin, admin_id)

    async def link_user(self, admin_id: uuid.UUID, user_ref: dict[str, str]) -> Admin | None:
        admin = await self.get(admin_id)
        if admin is None:
            return None
        admin.user = dict(user_ref)
        await self._session.flush()
        return admin
