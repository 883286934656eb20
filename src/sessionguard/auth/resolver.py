"""
sessionguard.auth.resolver

Authorization header -> `Principal`.

Responsibilities:
- Decode the header and validate the `(session id, key)` pair together.
- Load the owning user and its admin groups into an immutable snapshot.
- Collapse every failure into a single `Unauthenticated` outcome.
"""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sessionguard.auth.credentials import MalformedCredential, decode_credentials
from sessionguard.auth.models import Principal, freeze_roles
from sessionguard.db.models import ROLE_ADMIN
from sessionguard.db.repositories.admins import AdminRepo
from sessionguard.db.repositories.sessions import SessionLookupError, SessionRepo
from sessionguard.db.repositories.users import UserRepo
from sessionguard.observability.logging import get_logger

log = get_logger(__name__)


class Unauthenticated(Exception):
    pass


class IdentityResolver:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._sessions = SessionRepo(session)
        self._users = UserRepo(session)
        self._admins = AdminRepo(session)

    async def resolve(self, header: str | None) -> Principal:
        try:
            session_id, key = decode_credentials(header)
            record = await self._sessions.find_by_credentials(session_id, key)
        except (MalformedCredential, SessionLookupError) as e:
            log.info("authn_failed", reason=type(e).__name__)
            raise Unauthenticated() from e

        # A session must not outlive its user; a dangling reference is not a server fault.
        user = await self._users.get(record.user_id)
        if user is None or not user.is_active:
            log.info("authn_failed", reason="user_unavailable", user_id=record.user_id)
            raise Unauthenticated()

        admin_groups: frozenset[str] = frozenset()
        admin_ref = user.roles.get(ROLE_ADMIN)
        if admin_ref:
            admin = await self._admins.get(str(admin_ref.get("id", "")))
            if admin is not None:
                admin_groups = frozenset(admin.groups)

        principal = Principal(
            user_id=str(user.id),
            username=user.username,
            session_id=record.id,
            roles=freeze_roles(user.roles),
            admin_groups=admin_groups,
            is_system_root=user.is_system_root,
        )
        await self._touch(record.id)
        return principal

    async def _touch(self, session_id: str) -> None:
        # Best effort: a failed last-active bump never fails authentication.
        try:
            await self._sessions.update_last_active(session_id)
            await self._session.commit()
        except SQLAlchemyError:
            log.warning("session_touch_failed", exc_info=True)
            await self._session.rollback()
