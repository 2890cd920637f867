"""Validation feature for erp-authz-core.

Feature-First layout:
- entities/: context, issues, results, business rules and store protocols
- services/: business rule engine, cross-field checks and the staged pipeline
- repositories/: asyncpg implementation of the tenant-scoped store
"""

from .entities import (
    ValidationContext,
    ValidationIssue,
    ValidationResult,
    combine,
    BusinessRule,
    RangeCondition,
    PermissionCondition,
    TenantQueries,
    TenantScopedStore,
)
from .services import (
    CustomRuleRegistry,
    CustomPredicate,
    CrossFieldCheck,
    DateRangeCheck,
    ConditionalRequiredCheck,
    NumericRelationshipCheck,
    PercentageTotalCheck,
    BusinessRuleEngine,
    ValidationPipeline,
    ReferenceCheck,
)
from .repositories import AsyncPGTenantQueries, AsyncPGTenantStore

__all__ = [
    # Entities
    "ValidationContext",
    "ValidationIssue",
    "ValidationResult",
    "combine",
    "BusinessRule",
    "RangeCondition",
    "PermissionCondition",

    # Protocols
    "TenantQueries",
    "TenantScopedStore",

    # Services
    "CustomRuleRegistry",
    "CustomPredicate",
    "CrossFieldCheck",
    "DateRangeCheck",
    "ConditionalRequiredCheck",
    "NumericRelationshipCheck",
    "PercentageTotalCheck",
    "BusinessRuleEngine",
    "ValidationPipeline",
    "ReferenceCheck",

    # Repository Implementations
    "AsyncPGTenantQueries",
    "AsyncPGTenantStore",
]
