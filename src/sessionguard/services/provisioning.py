"""
sessionguard.services.provisioning

User provisioning (transaction owner).

Responsibilities:
- Create a user together with its role holder (Admin or Account).
- Cross-link both records with `{id, name}` back-references.
- Open a session and hand back a ready-to-use `Authorization` header.

Used by the test fixtures and by the seed command.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from sessionguard.auth.credentials import encode_credentials
from sessionguard.auth.passwords import hash_password
from sessionguard.db.models import (
    ROLE_ACCOUNT,
    ROLE_ADMIN,
    ROOT_USERNAME,
    Account,
    Admin,
    AuthSession,
    User,
)
from sessionguard.db.repositories.accounts import AccountRepo
from sessionguard.db.repositories.admins import AdminRepo
from sessionguard.db.repositories.sessions import SessionRepo
from sessionguard.db.repositories.users import UserRepo
from sessionguard.observability.logging import get_logger
from sessionguard.settings import Settings

log = get_logger(__name__)

ROOT_ADMIN_NAME = "Root Admin"
ROOT_PASSWORD = "root"
ROOT_EMAIL = "root@stimpy.show"
ROOT_GROUPS = ("Root",)


@dataclass(frozen=True, slots=True)
class Provisioned:
    user: User
    role_holder: Admin | Account
    session: AuthSession
    session_key: str
    auth_header: str


class ProvisioningService:
    def __init__(self, *, session: AsyncSession, settings: Settings) -> None:
        self._session = session
        self._settings = settings

        self._users = UserRepo(session)
        self._admins = AdminRepo(session)
        self._accounts = AccountRepo(session)
        self._sessions = SessionRepo(session)

    async def create_root_admin_user(self) -> Provisioned:
        return await self.create_admin_user(
            ROOT_ADMIN_NAME,
            ROOT_USERNAME,
            ROOT_PASSWORD,
            ROOT_EMAIL,
            groups=ROOT_GROUPS,
        )

    async def create_admin_user(
        self,
        name: str,
        username: str,
        password: str,
        email: str,
        groups: Sequence[str] = (),
    ) -> Provisioned:
        # `groups` are display names; AdminRepo.build derives the keys.
        return await self._provision(
            role=ROLE_ADMIN,
            build_holder=lambda: AdminRepo.build(name=name, groups=groups),
            username=username,
            password=password,
            email=email,
        )

    async def create_account_user(
        self,
        name: str,
        username: str,
        password: str,
        email: str,
    ) -> Provisioned:
        return await self._provision(
            role=ROLE_ACCOUNT,
            build_holder=lambda: AccountRepo.build(name=name),
            username=username,
            password=password,
            email=email,
        )

    async def _provision(
        self,
        *,
        role: str,
        build_holder: Callable[[], Admin | Account],
        username: str,
        password: str,
        email: str,
    ) -> Provisioned:
        try:
            # Fan-out: the user and the role holder do not depend on each other.
            user, holder = await asyncio.gather(
                self._build_user(username=username, password=password, email=email),
                self._build_holder(build_holder),
            )
            # Fan-in: both ids exist once flushed together.
            self._session.add_all([user, holder])
            await self._session.flush()

            if isinstance(holder, Admin):
                await self._admins.link_user(holder.id, user.ref())
            else:
                await self._accounts.link_user(holder.id, user.ref())
            await self._users.set_role(user.id, role, holder.ref())

            record, key = await self._sessions.create(
                user_id=str(user.id),
                ip=self._settings.session_origin,
                user_agent=self._settings.session_label,
            )
            await self._session.commit()
        except Exception:
            # All or nothing: no half-linked user is left behind.
            await self._session.rollback()
            raise

        log.info("user_provisioned", user_id=str(user.id), role=role)
        return Provisioned(
            user=user,
            role_holder=holder,
            session=record,
            session_key=key,
            auth_header=encode_credentials(record.id, key),
        )

    async def _build_user(self, *, username: str, password: str, email: str) -> User:
        # bcrypt is CPU-bound; keep it off the event loop.
        password_hash = await asyncio.to_thread(hash_password, password)
        return UserRepo.build(username=username, password_hash=password_hash, email=email)

    @staticmethod
    async def _build_holder(build: Callable[[], Admin | Account]) -> Admin | Account:
        return build()


# --- Module Notes -----------------------------------------------------------
# Both halves of the fan-out only build unsaved objects; the AsyncSession itself is
# touched sequentially, since it must not be shared by concurrent coroutines.
