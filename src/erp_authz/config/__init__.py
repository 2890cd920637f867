"""Configuration for erp-authz-core."""

from .constants import (
    CatalogDefaults,
    RoleLevelThresholds,
    RoleCode,
    RoleScope,
    RoleCategory,
    RoleComparison,
    PermissionAction,
    READ_ACTIONS,
    WRITE_ACTIONS,
    DELETE_ACTIONS,
    GuardOperator,
    OperationType,
    Severity,
    RuleType,
    IssueCode,
    DEFAULT_RULE_CODES,
)
from .logging_config import LoggingConfig, setup_logging, get_logger
from .settings import AuthzSettings, get_settings

__all__ = [
    "CatalogDefaults",
    "RoleLevelThresholds",
    "RoleCode",
    "RoleScope",
    "RoleCategory",
    "RoleComparison",
    "PermissionAction",
    "READ_ACTIONS",
    "WRITE_ACTIONS",
    "DELETE_ACTIONS",
    "GuardOperator",
    "OperationType",
    "Severity",
    "RuleType",
    "IssueCode",
    "DEFAULT_RULE_CODES",
    "LoggingConfig",
    "setup_logging",
    "get_logger",
    "AuthzSettings",
    "get_settings",
]
