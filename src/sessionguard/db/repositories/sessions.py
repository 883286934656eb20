"""
sessionguard.db.repositories.sessions

Repository for `AuthSession` entities (the session store).

Responsibilities:
- Open sessions: generate the id and a high-entropy key, persist only the key digest.
- Validate `(id, key)` pairs together.
- Touch `last_active` and invalidate sessions on logout.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from sessionguard.db.models import AuthSession, utcnow


class SessionLookupError(Exception):
    """Base for every way a credential pair can fail to resolve."""


class SessionNotFound(SessionLookupError):
    pass


class InvalidSessionKey(SessionLookupError):
    pass


def _digest(key: str) -> str:
    # Keys carry 256 bits of entropy, so a fast deterministic hash is enough.
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


class SessionRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, user_id: str, ip: str, user_agent: str) -> tuple[AuthSession, str]:
        """
        Open a session for `user_id`.

        Returns `(record, key)`. The raw key exists only in this return value;
        callers hand it to the client and drop it.
        """

        key = secrets.token_hex(32)
        record = AuthSession(
            key_hash=_digest(key),
            user_id=str(user_id),
            ip=ip,
            user_agent=user_agent,
        )
        self._session.add(record)
        await self._session.flush()
        return record, key

    async def get(self, session_id: str) -> AuthSession | None:
        return await self._session.get(AuthSession, session_id)

    async def find_by_credentials(self, session_id: str, key: str) -> AuthSession:
        record = await self.get(session_id)
        if record is None:
            raise SessionNotFound(session_id)
        if not hmac.compare_digest(record.key_hash, _digest(key)):
            raise InvalidSessionKey(session_id)
        return record

    async def update_last_active(self, session_id: str) -> None:
        stmt = (
            update(AuthSession)
            .where(AuthSession.id == session_id)
            .values(last_active=utcnow())
        )
        await self._session.execute(stmt)

    async def delete(self, session_id: str) -> bool:
        result = await self._session.execute(delete(AuthSession).where(AuthSession.id == session_id))
        return (result.rowcount or 0) > 0

    async def delete_for_user(self, user_id: str) -> int:
        result = await self._session.execute(
            delete(AuthSession).where(AuthSession.user_id == str(user_id))
        )
        return result.rowcount or 0


# --- Module Notes -----------------------------------------------------------
# SessionNotFound and InvalidSessionKey exist for tests and internal callers; the
# resolver catches their common base and never reports which half failed.
