"""
sessionguard.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Convert the `Authorization` header into a typed `Principal` (401 on failure).
- Enforce role scope and route preware via a reusable dependency factory (403).
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog
from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN

from sessionguard.api.deps import db_session, settings_dep
from sessionguard.auth.models import Decision, Principal
from sessionguard.auth.preware import Predicate, evaluate, require_scope
from sessionguard.auth.resolver import IdentityResolver, Unauthenticated
from sessionguard.observability.logging import get_logger
from sessionguard.settings import Settings

log = get_logger(__name__)


async def get_principal(
    request: Request,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> Principal:
    try:
        principal = await IdentityResolver(session).resolve(request.headers.get("authorization"))
    except Unauthenticated as e:
        # One body for every cause: malformed header, unknown session, wrong key, missing user.
        raise HTTPException(
            status_code=HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": f'Basic realm="{settings.auth_realm}"'},
        ) from e

    structlog.contextvars.bind_contextvars(user_id=principal.user_id)
    return principal


def _deny(principal: Principal, decision: Decision) -> HTTPException:
    log.info("authz_denied", user_id=principal.user_id, reason=decision.reason)
    return HTTPException(status_code=HTTP_403_FORBIDDEN, detail=decision.reason)


def require_roles(*scopes: str, pre: Sequence[Predicate] = ()):
    """
    Route guard: the caller must hold one of `scopes`, then pass every `pre`
    predicate in order.

    Predicates see the principal narrowed to the route's scopes, so an admin
    group check on an account-only route fails even for a user holding both roles.
    """

    scope_check = require_scope(*scopes)
    predicates = tuple(pre)

    def _dep(principal: Principal = Depends(get_principal)) -> Principal:
        decision = scope_check(principal)
        if not decision.allowed:
            raise _deny(principal, decision)

        scoped = principal.within_scope(scopes)
        decision = evaluate(scoped, predicates)
        if not decision.allowed:
            raise _deny(scoped, decision)
        return scoped

    return _dep


# --- Module Notes -----------------------------------------------------------
# Typical route:
#   @router.get("/x", dependencies=[Depends(require_roles("admin", pre=[require_not_root_user]))])
