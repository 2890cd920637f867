"""Exception hierarchy for erp-authz-core."""

from .base import AuthzCoreError, create_error_response
from .domain import (
    ConfigurationError,
    CatalogLoadError,
    RuleConfigurationError,
    UnknownPermissionError,
    UnknownRoleError,
    AuthorizationError,
    InvalidPermissionCodeError,
    StoreError,
    MissingTenantError,
)

__all__ = [
    "AuthzCoreError",
    "create_error_response",
    "ConfigurationError",
    "CatalogLoadError",
    "RuleConfigurationError",
    "UnknownPermissionError",
    "UnknownRoleError",
    "AuthorizationError",
    "InvalidPermissionCodeError",
    "StoreError",
    "MissingTenantError",
]
