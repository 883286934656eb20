"""
sessionguard.db.repositories.accounts

Repository for `Account` role holders.
"""

from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from sessionguard.db.models import Account


class AccountRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @staticmethod
    def build(*, name: str) -> Account:
        return Account(name=name, user=None)

    async def get(self, account_id: uuid.UUID | str) -> Account | None:
        if isinstance(account_id, str):
            try:
                account_id = uuid.UUID(account_id)
            except ValueError:
                return None
        return await self._session.get(Account, account_id)

    async def link_user(self, account_id: uuid.UUID, user_ref: dict[str, str]) -> Account | None:
        account = await self.get(account_id)
        if account is None:
            return None
        account.user = dict(user_ref)
        await self._session.flush()
        return account
