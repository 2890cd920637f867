"""Value objects for erp-authz-core."""

from .permission_code import PermissionCode

__all__ = ["PermissionCode"]
