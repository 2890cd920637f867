"""Validation entities: context, issues, results, rules and store contracts."""

from .context import ValidationContext
from .issues import ValidationIssue
from .result import ValidationResult, combine
from .rules import BusinessRule, RangeCondition, PermissionCondition
from .protocols import TenantQueries, TenantScopedStore

__all__ = [
    "ValidationContext",
    "ValidationIssue",
    "ValidationResult",
    "combine",
    "BusinessRule",
    "RangeCondition",
    "PermissionCondition",
    "TenantQueries",
    "TenantScopedStore",
]
