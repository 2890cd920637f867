"""Resolved actor context.

One authenticated actor within one tenant: its roles and the union of their
permissions. Built once per request and held read-only for the unit of work.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional


@dataclass(frozen=True)
class ActorContext:
    """Immutable roles and permissions of an actor inside a tenant."""

    actor_id: Optional[str]
    tenant_id: Optional[str]
    roles: FrozenSet[str] = field(default_factory=frozenset)
    permissions: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        # Accept any iterable and freeze it
        if not isinstance(self.roles, frozenset):
            object.__setattr__(self, "roles", frozenset(self.roles))
        if not isinstance(self.permissions, frozenset):
            object.__setattr__(self, "permissions", frozenset(self.permissions))

    def holds_role(self, role: str) -> bool:
        return role in self.roles

    def holds_permission(self, permission: str) -> bool:
        return permission in self.permissions

    def belongs_to(self, tenant_id: Optional[str]) -> bool:
        """Check the actor is scoped to the given tenant."""
        return self.tenant_id is not None and tenant_id is not None and str(self.tenant_id) == str(tenant_id)
