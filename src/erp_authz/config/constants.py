"""Constants and enums for erp-authz-core.

This module defines the closed literal sets used across the authorization
and validation core. Role and permission literals mirror the generated
RBAC catalog; the catalog itself is loaded as data at startup.
"""

from enum import Enum
from typing import Final


class CatalogDefaults:
    """Defaults for locating the packaged role/permission catalog."""

    PACKAGE: Final[str] = "erp_authz.features.permissions"
    DATA_DIR: Final[str] = "data"
    FILE_NAME: Final[str] = "rbac_catalog.v7.json"
    VERSION: Final[str] = "v7"


class RoleLevelThresholds:
    """Level deltas used to grade the impact of a role transition."""

    HIGH_IMPACT: Final[int] = 50
    MEDIUM_IMPACT: Final[int] = 25


class RoleCode(str, Enum):
    """Tenant roles defined by the RBAC catalog."""

    ADMIN = "ADMIN"
    PROJECT_MANAGER = "PROJECT_MANAGER"
    WORKER = "WORKER"
    VIEWER = "VIEWER"
    DRIVER = "DRIVER"


class RoleScope(str, Enum):
    """Scope a role is granted at."""

    TENANT = "TENANT"
    SYSTEM = "SYSTEM"


class RoleCategory(str, Enum):
    """Role classification used by conflict detection and optimization."""

    ADMINISTRATIVE = "administrative"
    OPERATIONAL = "operational"
    OBSERVER = "observer"


class RoleComparison(str, Enum):
    """Outcome of comparing two roles by privilege level."""

    HIGHER = "higher"
    LOWER = "lower"
    EQUAL = "equal"


class PermissionAction(str, Enum):
    """Closed set of actions a permission may name."""

    READ = "read"
    LIST = "list"
    EXPORT = "export"
    CREATE = "create"
    UPDATE = "update"
    DUPLICATE = "duplicate"
    SOFT_DELETE = "soft_delete"
    RESTORE = "restore"
    HARD_DELETE = "hard_delete"
    ARCHIVE = "archive"
    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"
    ASSIGN = "assign"
    UNASSIGN = "unassign"
    TRANSFER = "transfer"
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    REVIEW = "review"
    SEND = "send"
    PUBLISH = "publish"
    LOCK = "lock"
    UNLOCK = "unlock"
    SYNC = "sync"


# Action groups used by the convenience checks
READ_ACTIONS: Final[tuple] = (PermissionAction.READ,)
WRITE_ACTIONS: Final[tuple] = (
    PermissionAction.CREATE,
    PermissionAction.UPDATE,
    PermissionAction.DUPLICATE,
)
DELETE_ACTIONS: Final[tuple] = (
    PermissionAction.SOFT_DELETE,
    PermissionAction.HARD_DELETE,
)


class GuardOperator(str, Enum):
    """Boolean operator combining the leaves of a guard expression."""

    AND = "AND"
    OR = "OR"


class OperationType(str, Enum):
    """Write operation a validation call is performed for."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class Severity(str, Enum):
    """Severity of a validation issue."""

    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


class RuleType(str, Enum):
    """Business rule types understood by the rule engine."""

    REQUIRED_FIELD = "REQUIRED_FIELD"
    UNIQUE_CONSTRAINT = "UNIQUE_CONSTRAINT"
    RANGE_CONSTRAINT = "RANGE_CONSTRAINT"
    PERMISSION_CONSTRAINT = "PERMISSION_CONSTRAINT"
    CUSTOM_RULE = "CUSTOM_RULE"


class IssueCode(str, Enum):
    """Stable issue codes returned to presentation layers."""

    SCHEMA_INVALID = "SCHEMA_INVALID"
    FIELD_REQUIRED = "FIELD_REQUIRED"
    VALUE_OUT_OF_RANGE = "VALUE_OUT_OF_RANGE"
    DUPLICATE_VALUE = "DUPLICATE_VALUE"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    REFERENCE_NOT_FOUND = "REFERENCE_NOT_FOUND"
    RULE_CONFIGURATION_INVALID = "RULE_CONFIGURATION_INVALID"
    CUSTOM_RULE_FAILED = "CUSTOM_RULE_FAILED"
    TENANT_MISMATCH = "TENANT_MISMATCH"
    MISSING_TENANT_ID = "MISSING_TENANT_ID"
    MISSING_VERSION = "MISSING_VERSION"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    CONDITIONAL_FIELD_REQUIRED = "CONDITIONAL_FIELD_REQUIRED"
    INVALID_NUMERIC_RELATIONSHIP = "INVALID_NUMERIC_RELATIONSHIP"
    PERCENTAGE_TOTAL_EXCEEDED = "PERCENTAGE_TOTAL_EXCEEDED"


# Default issue code per rule type when a rule does not name its own
DEFAULT_RULE_CODES: Final[dict] = {
    RuleType.REQUIRED_FIELD: IssueCode.FIELD_REQUIRED,
    RuleType.UNIQUE_CONSTRAINT: IssueCode.DUPLICATE_VALUE,
    RuleType.RANGE_CONSTRAINT: IssueCode.VALUE_OUT_OF_RANGE,
    RuleType.PERMISSION_CONSTRAINT: IssueCode.PERMISSION_DENIED,
    RuleType.CUSTOM_RULE: IssueCode.CUSTOM_RULE_FAILED,
}
