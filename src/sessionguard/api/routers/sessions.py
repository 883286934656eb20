"""
sessionguard.api.routers.sessions

Session lifecycle endpoints.

Responsibilities:
- Exchange username/password for a session credential (`POST /v1/login`).
- Invalidate the caller's session (`DELETE /v1/logout`) or all of them (`DELETE /v1/sessions`).
- Describe the caller's resolved identity (`GET /v1/session`).
"""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_401_UNAUTHORIZED

from sessionguard.api.deps import db_session, settings_dep
from sessionguard.auth.credentials import encode_credentials
from sessionguard.auth.deps import get_principal
from sessionguard.auth.models import Principal
from sessionguard.auth.passwords import DUMMY_HASH, verify_password
from sessionguard.db.repositories.sessions import SessionRepo
from sessionguard.db.repositories.users import UserRepo
from sessionguard.observability.logging import get_logger
from sessionguard.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["sessions"])


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=128)
    password: str = Field(min_length=1, max_length=255)


class LoginResponse(BaseModel):
    session_id: str
    auth_header: str


class SessionResponse(BaseModel):
    user_id: str
    username: str
    session_id: str
    roles: dict[str, dict[str, str]]
    admin_groups: list[str]


@router.post("/login", response_model=LoginResponse)
async def login(
    request: Request,
    body: LoginRequest,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> LoginResponse:
    user = await UserRepo(session).get_by_username(body.username)

    # Always run bcrypt so response time does not reveal whether the username exists.
    hashed = user.password_hash if user is not None else DUMMY_HASH
    password_ok = await asyncio.to_thread(verify_password, body.password, hashed)
    if user is None or not password_ok or not user.is_active:
        log.info("login_failed")
        raise HTTPException(
            status_code=HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": f'Basic realm="{settings.auth_realm}"'},
        )

    ip = request.client.host if request.client else ""
    user_agent = request.headers.get("user-agent", "")[:256]
    record, key = await SessionRepo(session).create(
        user_id=str(user.id), ip=ip, user_agent=user_agent
    )
    await session.commit()

    log.info("login_succeeded", user_id=str(user.id))
    return LoginResponse(session_id=record.id, auth_header=encode_credentials(record.id, key))


@router.delete("/logout")
async def logout(
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, str]:
    await SessionRepo(session).delete(principal.session_id)
    await session.commit()
    return {"message": "Success."}


@router.delete("/sessions")
async def logout_everywhere(
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, int]:
    # Includes the session that made this request.
    removed = await SessionRepo(session).delete_for_user(principal.user_id)
    await session.commit()
    log.info("sessions_revoked", user_id=principal.user_id, count=removed)
    return {"revoked": removed}


@router.get("/session", response_model=SessionResponse)
async def whoami(principal: Principal = Depends(get_principal)) -> SessionResponse:
    return SessionResponse(
        user_id=principal.user_id,
        username=principal.username,
        session_id=principal.session_id,
        roles={name: dict(ref) for name, ref in principal.roles.items()},
        admin_groups=sorted(principal.admin_groups),
    )
