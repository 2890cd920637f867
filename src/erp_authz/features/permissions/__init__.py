"""Permissions feature for erp-authz-core.

Feature-First layout:
- entities/: catalog, role definitions, actor context, guard tree and protocols
- services/: role hierarchy and authorization engine
- repositories/: loading of the versioned catalog document
- data/: packaged catalog generated from the RBAC schema
"""

from .entities import (
    RoleDefinition,
    PermissionCatalog,
    ActorContext,
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
    RbacCheck,
    ActorResolver,
)
from .services import (
    RoleHierarchy,
    RoleCombinationReport,
    RoleOptimization,
    RoleTransition,
    AuthorizationEngine,
    AuthorizationDecision,
    ActorRbacCheck,
)
from .repositories import catalog_from_document, load_catalog, load_catalog_from_settings

__all__ = [
    # Entities
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

    # Protocols
    "RbacCheck",
    "ActorResolver",

    # Services
    "RoleHierarchy",
    "RoleCombinationReport",
    "RoleOptimization",
    "RoleTransition",
    "AuthorizationEngine",
    "AuthorizationDecision",
    "ActorRbacCheck",

    # Catalog loading
    "catalog_from_document",
    "load_catalog",
    "load_catalog_from_settings",
]
