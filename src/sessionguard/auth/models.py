"""
sessionguard.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`Principal`) injected into endpoints.
- Define the tagged outcome (`Decision`) returned by preware predicates.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from sessionguard.db.models import ROLE_ADMIN


def freeze_roles(roles: Mapping[str, Mapping[str, str]]) -> Mapping[str, Mapping[str, str]]:
    # Copy at resolution time; later role changes must not leak into an in-flight request.
    return MappingProxyType({name: MappingProxyType(dict(ref)) for name, ref in roles.items()})


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller identity for one request.
    """

    user_id: str
    username: str
    session_id: str
    roles: Mapping[str, Mapping[str, str]] = field(default_factory=lambda: MappingProxyType({}))
    # Group keys of the linked Admin role holder; empty without an admin role.
    admin_groups: frozenset[str] = frozenset()
    is_system_root: bool = False

    @property
    def scopes(self) -> frozenset[str]:
        return frozenset(self.roles)

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def within_scope(self, scopes: Iterable[str]) -> Principal:
        """Copy restricted to the roles a route's scope admits."""
        allowed = set(scopes)
        roles = {name: ref for name, ref in self.roles.items() if name in allowed}
        admin_groups = self.admin_groups if ROLE_ADMIN in roles else frozenset()
        return replace(self, roles=freeze_roles(roles), admin_groups=admin_groups)


@dataclass(frozen=True, slots=True)
class Decision:
    allowed: bool
    reason: str = ""


ALLOW = Decision(allowed=True)


def forbidden(reason: str) -> Decision:
    return Decision(allowed=False, reason=reason)


# --- Module Notes -----------------------------------------------------------
# Denial is an ordinary return value here; the HTTP layer turns it into a 403.
