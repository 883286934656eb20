"""
sessionguard.db.models

Persistence schema for identities, role holders and sessions.

Responsibilities:
- Define ORM models:
  - User: login identity with a `roles` map pointing at role holders
  - Admin: admin role holder with named groups
  - Account: account role holder
  - AuthSession: server-side session bound to a user
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, Index, String, Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column

from sessionguard.db.base import Base

# Fixed role names used as keys of `User.roles` and as route scopes.
ROLE_ADMIN = "admin"
ROLE_ACCOUNT = "account"

# The reserved system identity; matched case-sensitively.
ROOT_USERNAME = "root"


def utcnow() -> datetime:
    # Naive UTC timestamps; SQLite has no timezone-aware type.
    return datetime.now(UTC).replace(tzinfo=None)


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    username: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    email: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)

    is_active: Mapped[bool] = mapped_column(nullable=False, default=True)
    # Derived from `username` once, in `UserRepo.build`.
    is_system_root: Mapped[bool] = mapped_column(nullable=False, default=False)

    # role name -> {"id": <role holder id>, "name": <role holder name snapshot>}
    roles: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)

    def ref(self) -> dict[str, str]:
        return {"id": str(self.id), "name": self.username}


class Admin(Base):
    __tablename__ = "admins"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(256), nullable=False)

    # group key (slug of the lower-cased display name) -> display name
    groups: Mapped[dict[str, str]] = mapped_column(JSON, nullable=False, default=dict)
    # {"id": <user id>, "name": <username snapshot>}
    user: Mapped[dict[str, str] | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)

    def ref(self) -> dict[str, str]:
        return {"id": str(self.id), "name": self.name}


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    user: Mapped[dict[str, str] | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)

    def ref(self) -> dict[str, str]:
        return {"id": str(self.id), "name": self.name}


class AuthSession(Base):
    __tablename__ = "sessions"

    # uuid4 hex: no colons, so it survives the `id:key` credential framing.
    id: Mapped[str] = mapped_column(
        String(32), primary_key=True, default=lambda: uuid.uuid4().hex
    )
    # SHA-256 hex digest of the session key; the raw key is never stored.
    key_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)

    ip: Mapped[str] = mapped_column(String(64), nullable=False)
    user_agent: Mapped[str] = mapped_column(String(256), nullable=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    last_active: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)

    __table_args__ = (Index("ix_sessions_user_id", "user_id"),)


# --- Module Notes -----------------------------------------------------------
# User <-> Admin/Account links are two independent `{id, name}` snapshots. A rename
# on either side is not propagated to the other.
