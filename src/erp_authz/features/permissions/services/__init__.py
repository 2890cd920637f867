"""Permission services: role hierarchy and authorization engine."""

from .role_hierarchy import RoleHierarchy, RoleCombinationReport, RoleOptimization, RoleTransition
from .authorization_engine import AuthorizationEngine, AuthorizationDecision, ActorRbacCheck

__all__ = [
    "RoleHierarchy",
    "RoleCombinationReport",
    "RoleOptimization",
    "RoleTransition",
    "AuthorizationEngine",
    "AuthorizationDecision",
    "ActorRbacCheck",
]
