"""
tests.conftest

Shared fixtures.

Responsibilities:
- Isolated in-memory SQLite per test (StaticPool keeps one connection alive).
- An app with the guarded demo routes, served in-process over httpx.
- Provisioning helpers bound to the app's own database.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable

import httpx
import pytest
import pytest_asyncio
from fastapi import APIRouter, Depends, FastAPI
from sqlalchemy.ext.asyncio import AsyncSession

from sessionguard.api.app import create_app
from sessionguard.auth.credentials import encode_credentials
from sessionguard.auth.deps import require_roles
from sessionguard.auth.preware import require_admin_group, require_not_root_user
from sessionguard.db.init_db import init_db
from sessionguard.db.repositories.sessions import SessionRepo
from sessionguard.db.session import create_engine, create_sessionmaker
from sessionguard.services.provisioning import Provisioned, ProvisioningService
from sessionguard.settings import Settings

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def settings() -> Settings:
    return Settings(env="test", database_url=TEST_DB_URL, log_level="WARNING")


@pytest_asyncio.fixture
async def db(settings: Settings) -> AsyncIterator[AsyncSession]:
    engine = create_engine(settings)
    await init_db(engine)
    async with create_sessionmaker(engine)() as session:
        yield session
    await engine.dispose()


@pytest_asyncio.fixture
async def provisioning(db: AsyncSession, settings: Settings) -> ProvisioningService:
    return ProvisioningService(session=db, settings=settings)


async def _ok() -> dict[str, str]:
    return {"message": "ok"}


def guarded_router() -> APIRouter:
    router = APIRouter()
    router.add_api_route(
        "/limited/to/root/group",
        _ok,
        methods=["GET"],
        dependencies=[Depends(require_roles("admin", pre=[require_admin_group("root")]))],
    )
    router.add_api_route(
        "/limited/to/multiple/groups",
        _ok,
        methods=["GET"],
        dependencies=[
            Depends(require_roles("admin", pre=[require_admin_group(["sales", "support"])]))
        ],
    )
    router.add_api_route(
        "/just/not/the/root/user",
        _ok,
        methods=["GET"],
        dependencies=[Depends(require_roles("admin", pre=[require_not_root_user]))],
    )
    router.add_api_route(
        "/accounts/only",
        _ok,
        methods=["GET"],
        dependencies=[Depends(require_roles("account"))],
    )
    return router


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    app.include_router(guarded_router())
    # httpx ASGITransport does not run lifespan; enter it explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def provision(app: FastAPI, settings: Settings) -> Callable[..., Awaitable[Provisioned]]:
    """`await provision("create_admin_user", name, username, ...)` against the app's DB."""

    async def _run(method: str, *args, **kwargs) -> Provisioned:
        async with app.state.sessionmaker() as session:
            svc = ProvisioningService(session=session, settings=settings)
            return await getattr(svc, method)(*args, **kwargs)

    return _run


@pytest.fixture
def open_session(app: FastAPI) -> Callable[[str], Awaitable[str]]:
    """Open an extra session for a user id and return its Authorization header."""

    async def _run(user_id: str) -> str:
        async with app.state.sessionmaker() as session:
            record, key = await SessionRepo(session).create(
                user_id=user_id, ip="127.0.0.1", user_agent="Lab"
            )
            await session.commit()
        return encode_credentials(record.id, key)

    return _run
