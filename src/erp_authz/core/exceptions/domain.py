"""Domain-specific exceptions for erp-authz-core.

Only deployment defects and infrastructure failures are raised. Bad user
input is reported through ValidationResult issues instead.
"""

from .base import AuthzCoreError


# Configuration Errors
class ConfigurationError(AuthzCoreError):
    """Raised when there's a configuration issue."""
    pass


class CatalogLoadError(ConfigurationError):
    """Raised when the role/permission catalog cannot be loaded or is inconsistent."""
    pass


class RuleConfigurationError(ConfigurationError):
    """Raised when a business rule is misconfigured or names an unknown predicate."""

    def __init__(self, message: str, rule_id=None, **kwargs):
        details = kwargs.pop("details", None) or {}
        if rule_id is not None:
            details["rule_id"] = rule_id
        super().__init__(message, error_code="RULE_CONFIGURATION_INVALID", details=details, **kwargs)
        self.rule_id = rule_id


class UnknownPermissionError(ConfigurationError):
    """Raised when a permission is referenced that no catalog role grants."""
    pass


class UnknownRoleError(ConfigurationError):
    """Raised when a role is referenced that the catalog does not define."""
    pass


# Authorization Errors
class AuthorizationError(AuthzCoreError):
    """Base class for authorization-related errors."""
    pass


class InvalidPermissionCodeError(AuthorizationError):
    """Raised when a permission string is not in Resource.action form."""
    pass


# Store Errors
class StoreError(AuthzCoreError):
    """Raised when the tenant-scoped store fails."""
    pass


class MissingTenantError(StoreError):
    """Raised when a tenant-scoped query is attempted without a tenant."""
    pass
