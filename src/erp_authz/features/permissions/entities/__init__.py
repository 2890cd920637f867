"""Permission entities: catalog, roles, actor context, guards and protocols."""

from .role import RoleDefinition
from .catalog import PermissionCatalog
from .actor_context import ActorContext
from .guards import (
    GuardPredicate,
    GuardNode,
    RoleLeaf,
    PermissionLeaf,
    PredicateLeaf,
    AllOf,
    AnyOf,
    all_of,
    any_of,
    guard_from_mapping,
)
from .protocols import RbacCheck, ActorResolver

__all__ = [
    "RoleDefinition",
    "PermissionCatalog",
    "ActorContext",
    "GuardPredicate",
    "GuardNode",
    "RoleLeaf",
    "PermissionLeaf",
    "PredicateLeaf",
    "AllOf",
    "AnyOf",
    "all_of",
    "any_of",
    "guard_from_mapping",
    "RbacCheck",
    "ActorResolver",
]
