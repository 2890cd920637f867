"""erp-authz-core - authorization and validation core of the multi-tenant ERP.

Provides the role/permission catalog, role hierarchy and authorization
engine, and the staged validation pipeline with tenant-scoped integrity
checks.
"""

# Initialize logging configuration on import
from .config.logging_config import setup_logging
setup_logging()

from .__version__ import __version__

from .config import AuthzSettings, get_settings, RoleCode, OperationType, Severity, RuleType, IssueCode

from .core.exceptions import (
    AuthzCoreError,
    ConfigurationError,
    CatalogLoadError,
    RuleConfigurationError,
    UnknownPermissionError,
    UnknownRoleError,
    AuthorizationError,
    InvalidPermissionCodeError,
    StoreError,
    MissingTenantError,
    create_error_response,
)

from .features.permissions import (
    PermissionCatalog,
    RoleDefinition,
    ActorContext,
    RoleHierarchy,
    AuthorizationEngine,
    AuthorizationDecision,
    RbacCheck,
    ActorResolver,
    AllOf,
    AnyOf,
    RoleLeaf,
    PermissionLeaf,
    PredicateLeaf,
    guard_from_mapping,
    load_catalog,
)

from .features.validation import (
    ValidationContext,
    ValidationIssue,
    ValidationResult,
    BusinessRule,
    RangeCondition,
    PermissionCondition,
    BusinessRuleEngine,
    CustomRuleRegistry,
    ValidationPipeline,
    ReferenceCheck,
    TenantScopedStore,
    AsyncPGTenantStore,
)

__all__ = [
    "__version__",

    # Configuration
    "AuthzSettings",
    "get_settings",
    "RoleCode",
    "OperationType",
    "Severity",
    "RuleType",
    "IssueCode",

    # Exceptions
    "AuthzCoreError",
    "ConfigurationError",
    "CatalogLoadError",
    "RuleConfigurationError",
    "UnknownPermissionError",
    "UnknownRoleError",
    "AuthorizationError",
    "InvalidPermissionCodeError",
    "StoreError",
    "MissingTenantError",
    "create_error_response",

    # Permissions
    "PermissionCatalog",
    "RoleDefinition",
    "ActorContext",
    "RoleHierarchy",
    "AuthorizationEngine",
    "AuthorizationDecision",
    "RbacCheck",
    "ActorResolver",
    "AllOf",
    "AnyOf",
    "RoleLeaf",
    "PermissionLeaf",
    "PredicateLeaf",
    "guard_from_mapping",
    "load_catalog",

    # Validation
    "ValidationContext",
    "ValidationIssue",
    "ValidationResult",
    "BusinessRule",
    "RangeCondition",
    "PermissionCondition",
    "BusinessRuleEngine",
    "CustomRuleRegistry",
    "ValidationPipeline",
    "ReferenceCheck",
    "TenantScopedStore",
    "AsyncPGTenantStore",
]
