"""
tests.test_resolver

IdentityResolver against a real (in-memory) store.
"""

from __future__ import annotations

import uuid
from datetime import datetime

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sessionguard.auth.credentials import encode_credentials
from sessionguard.auth.resolver import IdentityResolver, Unauthenticated
from sessionguard.db.models import User
from sessionguard.db.repositories.sessions import SessionRepo
from sessionguard.db.repositories.users import UserRepo
from sessionguard.services.provisioning import ProvisioningService


@pytest.mark.asyncio
async def test_resolves_admin_principal(db: AsyncSession, provisioning: ProvisioningService) -> None:
    ren = await provisioning.create_admin_user(
        "Ren Hoek", "ren", "baddog", "ren@stimpy.show", ["Sales", "Customer Support"]
    )

    principal = await IdentityResolver(db).resolve(ren.auth_header)

    assert principal.user_id == str(ren.user.id)
    assert principal.username == "ren"
    assert principal.session_id == ren.session.id
    assert dict(principal.roles["admin"]) == {"id": str(ren.role_holder.id), "name": "Ren Hoek"}
    assert principal.admin_groups == frozenset({"sales", "customer-support"})
    assert principal.is_system_root is False


@pytest.mark.asyncio
async def test_account_principal_has_no_admin_groups(
    db: AsyncSession, provisioning: ProvisioningService
) -> None:
    stimpy = await provisioning.create_account_user(
        "Stimpson Cat", "stimpy", "goodcat", "stimpy@stimpy.show"
    )

    principal = await IdentityResolver(db).resolve(stimpy.auth_header)

    assert principal.scopes == frozenset({"account"})
    assert principal.admin_groups == frozenset()


@pytest.mark.asyncio
async def test_roles_are_a_snapshot(db: AsyncSession, provisioning: ProvisioningService) -> None:
    ren = await provisioning.create_admin_user("Ren Hoek", "ren", "baddog", "ren@stimpy.show")
    principal = await IdentityResolver(db).resolve(ren.auth_header)

    await UserRepo(db).set_role(ren.user.id, "account", {"id": "acc-1", "name": "Ren"})
    await db.commit()

    assert principal.scopes == frozenset({"admin"})
    with pytest.raises(TypeError):
        principal.roles["account"] = {}  # type: ignore[index]


@pytest.mark.asyncio
async def test_wrong_key_and_foreign_key_fail_alike(
    db: AsyncSession, provisioning: ProvisioningService
) -> None:
    ren = await provisioning.create_admin_user("Ren Hoek", "ren", "baddog", "ren@stimpy.show")
    stimpy = await provisioning.create_account_user("Stimpy", "stimpy", "goodcat", "s@stimpy.show")
    resolver = IdentityResolver(db)

    for header in (
        encode_credentials(ren.session.id, "0" * 64),
        encode_credentials(ren.session.id, stimpy.session_key),
        encode_credentials(uuid.uuid4().hex, ren.session_key),
        "Basic not-base64",
        None,
    ):
        with pytest.raises(Unauthenticated):
            await resolver.resolve(header)


@pytest.mark.asyncio
async def test_dangling_user_reference_is_unauthenticated(db: AsyncSession) -> None:
    record, key = await SessionRepo(db).create(
        user_id=str(uuid.uuid4()), ip="127.0.0.1", user_agent="Lab"
    )
    await db.commit()

    with pytest.raises(Unauthenticated):
        await IdentityResolver(db).resolve(encode_credentials(record.id, key))


@pytest.mark.asyncio
async def test_inactive_user_is_unauthenticated(
    db: AsyncSession, provisioning: ProvisioningService
) -> None:
    ren = await provisioning.create_admin_user("Ren Hoek", "ren", "baddog", "ren@stimpy.show")
    ren.user.is_active = False
    await db.commit()

    with pytest.raises(Unauthenticated):
        await IdentityResolver(db).resolve(ren.auth_header)


@pytest.mark.asyncio
async def test_resolve_bumps_last_active(db: AsyncSession, provisioning: ProvisioningService) -> None:
    ren = await provisioning.create_admin_user("Ren Hoek", "ren", "baddog", "ren@stimpy.show")
    stale = datetime(2000, 1, 1)
    ren.session.last_active = stale
    await db.commit()

    await IdentityResolver(db).resolve(ren.auth_header)

    await db.refresh(ren.session)
    assert ren.session.last_active > stale


@pytest.mark.asyncio
async def test_failed_last_active_bump_still_authenticates(
    db: AsyncSession, provisioning: ProvisioningService, monkeypatch: pytest.MonkeyPatch
) -> None:
    ren = await provisioning.create_admin_user("Ren Hoek", "ren", "baddog", "ren@stimpy.show")
    expected_id = ren.session.id

    async def _fail(self: SessionRepo, session_id: str) -> None:
        raise SQLAlchemyError("store unavailable")

    monkeypatch.setattr(SessionRepo, "update_last_active", _fail)

    principal = await IdentityResolver(db).resolve(ren.auth_header)

    assert principal.username == "ren"
    assert principal.session_id == expected_id
    # The rollback leaves the session usable.
    assert await UserRepo(db).get_by_username("ren") is not None


@pytest.mark.asyncio
async def test_root_flag_comes_from_the_user_row(
    db: AsyncSession, provisioning: ProvisioningService
) -> None:
    root = await provisioning.create_root_admin_user()
    principal = await IdentityResolver(db).resolve(root.auth_header)

    assert principal.username == "root"
    assert principal.is_system_root is True
    assert isinstance(root.user, User)
