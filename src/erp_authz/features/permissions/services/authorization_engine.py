"""Authorization engine.

Answers role/permission membership queries and evaluates guard trees for
an ActorContext. Every query is a pure function of the actor and the query;
the catalog and hierarchy are read-only dependencies.

Tenant scoping: when a query names the tenant owning the resource and it
differs from the actor's tenant, the answer is "no access". No error is
raised so that cross-tenant probes learn nothing from error messages.
"""

import inspect
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Union

from ....config.constants import DELETE_ACTIONS, READ_ACTIONS, WRITE_ACTIONS, PermissionAction
from ....core.exceptions import ConfigurationError
from ....core.value_objects import PermissionCode
from ..entities import (
    ActorContext,
    AllOf,
    AnyOf,
    GuardNode,
    PermissionCatalog,
    PermissionLeaf,
    PredicateLeaf,
    RoleLeaf,
)
from .role_hierarchy import RoleHierarchy


logger = logging.getLogger(__name__)

RoleQuery = Union[str, Iterable[str]]
PermissionQuery = Union[str, Iterable[str]]


@dataclass(frozen=True)
class AuthorizationDecision:
    """Outcome of an authorization check with the reason for a denial."""

    granted: bool
    reason: Optional[str] = None
    missing_permissions: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.granted


def _as_list(query: Union[str, Iterable[str], None]) -> List[str]:
    if query is None:
        return []
    if isinstance(query, str):
        return [query]
    return list(query)


class AuthorizationEngine:
    """Role and permission checks against a resolved actor context."""

    def __init__(
        self,
        catalog: PermissionCatalog,
        hierarchy: Optional[RoleHierarchy] = None,
        strict_permissions: bool = True,
    ):
        self.catalog = catalog
        self.hierarchy = hierarchy if hierarchy is not None else RoleHierarchy(catalog)
        self.strict_permissions = strict_permissions

    # Actor resolution

    def resolve_actor(
        self,
        actor_id: Optional[str],
        tenant_id: Optional[str],
        roles: Iterable[str],
    ) -> ActorContext:
        """Build an actor context from persisted role assignments.

        Conflicting roles are allowed; the actor receives the union of the
        permissions of every role it holds.

        Raises:
            UnknownRoleError: When a role is not defined in the catalog
        """
        role_set = frozenset(roles)
        permissions = self.catalog.permissions_for_roles(role_set)
        report = self.hierarchy.validate_combination(role_set)
        if report.conflicts:
            logger.warning(f"Actor {actor_id} in tenant {tenant_id} holds conflicting roles: {report.conflicts}")
        return ActorContext(actor_id=actor_id, tenant_id=tenant_id, roles=role_set, permissions=permissions)

    # Tenant scoping

    def _tenant_allows(self, actor: ActorContext, resource_tenant_id: Optional[str]) -> bool:
        if resource_tenant_id is None:
            return True
        if actor.belongs_to(resource_tenant_id):
            return True
        logger.warning(
            f"Cross-tenant access denied: actor {actor.actor_id} of tenant {actor.tenant_id} "
            f"against resource tenant {resource_tenant_id}"
        )
        return False

    def _check_permissions(self, permissions: List[str]) -> None:
        if not self.strict_permissions:
            return
        for permission in permissions:
            PermissionCode(permission)
            self.catalog.ensure_permission(permission)

    # Role queries

    def has_role(self, actor: ActorContext, roles: RoleQuery, resource_tenant_id: Optional[str] = None) -> bool:
        """True if the actor holds ANY of the given roles."""
        return self.has_any_role(actor, _as_list(roles), resource_tenant_id)

    def has_any_role(self, actor: ActorContext, roles: Iterable[str], resource_tenant_id: Optional[str] = None) -> bool:
        role_list = _as_list(roles)
        if not role_list or not self._tenant_allows(actor, resource_tenant_id):
            return False
        return any(role in actor.roles for role in role_list)

    def has_all_roles(self, actor: ActorContext, roles: Iterable[str], resource_tenant_id: Optional[str] = None) -> bool:
        """True if the actor holds EVERY given role; an empty list is satisfied."""
        role_list = _as_list(roles)
        if not self._tenant_allows(actor, resource_tenant_id):
            return False
        return all(role in actor.roles for role in role_list)

    # Permission queries

    def has_permission(
        self,
        actor: ActorContext,
        permissions: PermissionQuery,
        resource_tenant_id: Optional[str] = None,
    ) -> bool:
        """True if the actor holds ANY of the given permissions."""
        return self.has_any_permission(actor, _as_list(permissions), resource_tenant_id)

    def has_any_permission(
        self,
        actor: ActorContext,
        permissions: Iterable[str],
        resource_tenant_id: Optional[str] = None,
    ) -> bool:
        permission_list = _as_list(permissions)
        self._check_permissions(permission_list)
        if not permission_list or not self._tenant_allows(actor, resource_tenant_id):
            return False
        return any(p in actor.permissions for p in permission_list)

    def has_all_permissions(
        self,
        actor: ActorContext,
        permissions: Iterable[str],
        resource_tenant_id: Optional[str] = None,
    ) -> bool:
        permission_list = _as_list(permissions)
        self._check_permissions(permission_list)
        if not self._tenant_allows(actor, resource_tenant_id):
            return False
        return all(p in actor.permissions for p in permission_list)

    def authorize(
        self,
        actor: ActorContext,
        permissions: PermissionQuery,
        require_all: bool = True,
        resource_tenant_id: Optional[str] = None,
    ) -> AuthorizationDecision:
        """Check permissions and explain a denial."""
        permission_list = _as_list(permissions)
        self._check_permissions(permission_list)

        if not self._tenant_allows(actor, resource_tenant_id):
            return AuthorizationDecision(False, reason="Access denied", missing_permissions=permission_list)

        missing = [p for p in permission_list if p not in actor.permissions]
        if require_all:
            granted = not missing
        else:
            granted = bool(permission_list) and len(missing) < len(permission_list)

        if granted:
            return AuthorizationDecision(True)
        return AuthorizationDecision(
            False,
            reason=f"Missing required permissions: {', '.join(missing)}",
            missing_permissions=missing,
        )

    # Resource convenience checks

    def _resource_permissions(self, resource: str, actions: Iterable[PermissionAction]) -> List[str]:
        """Catalog permissions of a resource for the given actions."""
        candidates = [PermissionCode.of(resource, action).value for action in actions]
        return [p for p in candidates if self.catalog.contains_permission(p)]

    def can_read(self, actor: ActorContext, resource: str, resource_tenant_id: Optional[str] = None) -> bool:
        permissions = self._resource_permissions(resource, READ_ACTIONS)
        return self.has_any_permission(actor, permissions, resource_tenant_id)

    def can_write(self, actor: ActorContext, resource: str, resource_tenant_id: Optional[str] = None) -> bool:
        permissions = self._resource_permissions(resource, WRITE_ACTIONS)
        return self.has_any_permission(actor, permissions, resource_tenant_id)

    def can_delete(self, actor: ActorContext, resource: str, resource_tenant_id: Optional[str] = None) -> bool:
        permissions = self._resource_permissions(resource, DELETE_ACTIONS)
        return self.has_any_permission(actor, permissions, resource_tenant_id)

    def validate_context(
        self,
        actor: ActorContext,
        required_roles: Optional[Iterable[str]] = None,
        required_permissions: Optional[Iterable[str]] = None,
        tenant_id: Optional[str] = None,
    ) -> AuthorizationDecision:
        """Check tenant, then any required role, then any required permission."""
        if tenant_id is not None and not self._tenant_allows(actor, tenant_id):
            return AuthorizationDecision(False, reason="Tenant access denied")

        roles = _as_list(required_roles)
        if roles and not self.has_any_role(actor, roles):
            return AuthorizationDecision(False, reason=f"Missing required role: one of {', '.join(roles)}")

        permissions = _as_list(required_permissions)
        if permissions and not self.has_any_permission(actor, permissions):
            return AuthorizationDecision(
                False,
                reason=f"Missing required permission: one of {', '.join(permissions)}",
                missing_permissions=permissions,
            )

        return AuthorizationDecision(True)

    # Guards

    def evaluate_guard(
        self,
        actor: ActorContext,
        guard: GuardNode,
        resource_tenant_id: Optional[str] = None,
    ) -> bool:
        """Evaluate a guard tree with synchronous predicates.

        A predicate that raises, or returns an awaitable, is not satisfied.
        """
        if not self._tenant_allows(actor, resource_tenant_id):
            return False
        return self._evaluate(actor, guard)

    async def evaluate_guard_async(
        self,
        actor: ActorContext,
        guard: GuardNode,
        resource_tenant_id: Optional[str] = None,
    ) -> bool:
        """Evaluate a guard tree whose predicates may be coroutines."""
        if not self._tenant_allows(actor, resource_tenant_id):
            return False
        return await self._evaluate_async(actor, guard)

    def _evaluate(self, actor: ActorContext, node: GuardNode) -> bool:
        if isinstance(node, AllOf):
            return all(self._evaluate(actor, child) for child in node.children)
        if isinstance(node, AnyOf):
            if not node.children:
                return True
            return any(self._evaluate(actor, child) for child in node.children)
        if isinstance(node, PredicateLeaf):
            return self._run_predicate(actor, node)
        return self._evaluate_leaf(actor, node)

    async def _evaluate_async(self, actor: ActorContext, node: GuardNode) -> bool:
        if isinstance(node, AllOf):
            for child in node.children:
                if not await self._evaluate_async(actor, child):
                    return False
            return True
        if isinstance(node, AnyOf):
            if not node.children:
                return True
            for child in node.children:
                if await self._evaluate_async(actor, child):
                    return True
            return False
        if isinstance(node, PredicateLeaf):
            try:
                outcome = node.predicate(actor)
                if inspect.isawaitable(outcome):
                    outcome = await outcome
                return bool(outcome)
            except Exception:
                logger.warning(f"Guard predicate '{node.name}' failed for actor {actor.actor_id}", exc_info=True)
                return False
        return self._evaluate_leaf(actor, node)

    def _evaluate_leaf(self, actor: ActorContext, node: GuardNode) -> bool:
        if isinstance(node, RoleLeaf):
            return node.role in actor.roles
        if isinstance(node, PermissionLeaf):
            self._check_permissions([node.permission])
            return node.permission in actor.permissions
        raise ConfigurationError(f"Unsupported guard node: {node!r}")

    def _run_predicate(self, actor: ActorContext, node: PredicateLeaf) -> bool:
        try:
            outcome = node.predicate(actor)
        except Exception:
            logger.warning(f"Guard predicate '{node.name}' failed for actor {actor.actor_id}", exc_info=True)
            return False
        if inspect.isawaitable(outcome):
            # Close the coroutine so it is not reported as never awaited
            close = getattr(outcome, "close", None)
            if close is not None:
                close()
            logger.warning(f"Guard predicate '{node.name}' is asynchronous; use evaluate_guard_async")
            return False
        return bool(outcome)

    def for_actor(self, actor: ActorContext, resource_tenant_id: Optional[str] = None) -> "ActorRbacCheck":
        """Bind the RbacCheck contract to one actor."""
        return ActorRbacCheck(self, actor, resource_tenant_id)


class ActorRbacCheck:
    """RbacCheck implementation bound to a single actor."""

    def __init__(self, engine: AuthorizationEngine, actor: ActorContext, resource_tenant_id: Optional[str] = None):
        self.engine = engine
        self.actor = actor
        self.resource_tenant_id = resource_tenant_id

    def has_role(self, role: RoleQuery) -> bool:
        return self.engine.has_role(self.actor, role, self.resource_tenant_id)

    def has_permission(self, permission: PermissionQuery) -> bool:
        return self.engine.has_permission(self.actor, permission, self.resource_tenant_id)

    def has_any_role(self, roles: Iterable[str]) -> bool:
        return self.engine.has_any_role(self.actor, roles, self.resource_tenant_id)

    def has_any_permission(self, permissions: Iterable[str]) -> bool:
        return self.engine.has_any_permission(self.actor, permissions, self.resource_tenant_id)

    def has_all_roles(self, roles: Iterable[str]) -> bool:
        return self.engine.has_all_roles(self.actor, roles, self.resource_tenant_id)

    def has_all_permissions(self, permissions: Iterable[str]) -> bool:
        return self.engine.has_all_permissions(self.actor, permissions, self.resource_tenant_id)

    def evaluate_guard(self, guard: GuardNode) -> bool:
        return self.engine.evaluate_guard(self.actor, guard, self.resource_tenant_id)
