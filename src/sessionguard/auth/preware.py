"""
sessionguard.auth.preware

Post-authentication route predicates.

Each predicate is a pure function `Principal -> Decision`. Routes declare an
ordered tuple of them; `evaluate` runs them in order and stops at the first
denial, so predicates must not rely on running.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence

from sessionguard.auth.groups import group_key
from sessionguard.auth.models import ALLOW, Decision, Principal, forbidden
from sessionguard.db.models import ROLE_ADMIN, ROOT_USERNAME

Predicate = Callable[[Principal], Decision]

MISSING_GROUP = "Missing admin group membership"
ROOT_DENIED = "Not permitted for root user"


def require_admin_group(groups: str | Sequence[str]) -> Predicate:
    """
    Allow admins belonging to at least one of `groups` (display names).

    Names are normalized like provisioning does, so "Sales", "sales" and
    "SALES" are the same group. An empty list can never be satisfied.
    """

    candidates = [groups] if isinstance(groups, str) else list(groups)
    keys = frozenset(k for k in map(group_key, candidates) if k)

    def _require_admin_group(principal: Principal) -> Decision:
        if not keys or not principal.has_role(ROLE_ADMIN):
            return forbidden(MISSING_GROUP)
        if principal.admin_groups.isdisjoint(keys):
            return forbidden(MISSING_GROUP)
        return ALLOW

    return _require_admin_group


def require_not_root_user(principal: Principal) -> Decision:
    # Deny-override: no role or group membership lifts this.
    if principal.is_system_root or principal.username == ROOT_USERNAME:
        return forbidden(ROOT_DENIED)
    return ALLOW


def require_scope(*scopes: str) -> Predicate:
    """Allow principals holding at least one of the route's scopes."""
    wanted = frozenset(scopes)

    def _require_scope(principal: Principal) -> Decision:
        if wanted.isdisjoint(principal.scopes):
            return forbidden("Insufficient scope")
        return ALLOW

    return _require_scope


def evaluate(principal: Principal, predicates: Iterable[Predicate]) -> Decision:
    for predicate in predicates:
        decision = predicate(principal)
        if not decision.allowed:
            return decision
    return ALLOW
