"""Permission catalog entity.

The catalog is the total mapping Role -> frozenset of permissions produced
by the external RBAC schema generator. It is validated once on
construction and never mutated, so a single instance is shared by every
concurrent evaluation without locking.
"""

from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Set

from ....core.exceptions import (
    CatalogLoadError,
    InvalidPermissionCodeError,
    UnknownPermissionError,
    UnknownRoleError,
)
from ....core.value_objects import PermissionCode
from .role import RoleDefinition


class PermissionCatalog:
    """Immutable role/permission catalog."""

    __slots__ = ("_version", "_roles", "_role_permissions", "_all_permissions")

    def __init__(
        self,
        version: str,
        roles: Mapping[str, RoleDefinition],
        role_permissions: Mapping[str, Iterable[str]],
    ):
        if not version:
            raise CatalogLoadError("Catalog version is required")

        undefined = set(role_permissions) - set(roles)
        if undefined:
            raise CatalogLoadError(f"Permissions granted to undefined roles: {sorted(undefined)}")
        unmapped = set(roles) - set(role_permissions)
        if unmapped:
            raise CatalogLoadError(f"Roles without a permission set: {sorted(unmapped)}")

        mapping: Dict[str, FrozenSet[str]] = {}
        for role_code, permissions in role_permissions.items():
            if isinstance(permissions, str):
                raise CatalogLoadError(f"Permissions of role {role_code} must be a list")
            try:
                mapping[role_code] = frozenset(PermissionCode(p).value for p in permissions)
            except InvalidPermissionCodeError as e:
                raise CatalogLoadError(f"Role {role_code}: {e.message}") from e

        self._version = str(version)
        self._roles = MappingProxyType(dict(roles))
        self._role_permissions = MappingProxyType(mapping)
        self._all_permissions = frozenset().union(*mapping.values()) if mapping else frozenset()

    @property
    def version(self) -> str:
        return self._version

    @property
    def roles(self) -> List[RoleDefinition]:
        """Roles ordered by level (highest first), then code."""
        return sorted(self._roles.values(), key=lambda r: (-r.level, r.code))

    @property
    def role_codes(self) -> List[str]:
        return [r.code for r in self.roles]

    @property
    def all_permissions(self) -> FrozenSet[str]:
        return self._all_permissions

    def has_role(self, role: str) -> bool:
        return role in self._roles

    def role(self, role: str) -> RoleDefinition:
        """Get a role definition, raising UnknownRoleError when undefined."""
        try:
            return self._roles[role]
        except KeyError:
            raise UnknownRoleError(f"Role not defined in catalog {self._version}: {role}") from None

    def find_role(self, role: str) -> Optional[RoleDefinition]:
        return self._roles.get(role)

    def permissions_for(self, role: str) -> FrozenSet[str]:
        """Get the permission set granted to a role."""
        try:
            return self._role_permissions[role]
        except KeyError:
            raise UnknownRoleError(f"Role not defined in catalog {self._version}: {role}") from None

    def permissions_for_roles(self, roles: Iterable[str]) -> FrozenSet[str]:
        """Union of the permission sets of several roles."""
        result: Set[str] = set()
        for role in roles:
            result |= self.permissions_for(role)
        return frozenset(result)

    def contains_permission(self, permission: str) -> bool:
        return permission in self._all_permissions

    def ensure_permission(self, permission: str) -> str:
        """Check a permission is granted by at least one role."""
        if permission not in self._all_permissions:
            raise UnknownPermissionError(
                f"Permission not granted by any role in catalog {self._version}: {permission}",
                details={"permission": permission},
            )
        return permission

    def roles_with_permission(self, permission: str) -> List[str]:
        return [r.code for r in self.roles if permission in self._role_permissions[r.code]]

    def resources(self) -> List[str]:
        return sorted({p.split(".", 1)[0] for p in self._all_permissions})

    def summary(self) -> Dict[str, object]:
        return {
            "version": self._version,
            "roles": len(self._roles),
            "permissions": len(self._all_permissions),
            "resources": len(self.resources()),
        }

    def __contains__(self, permission: object) -> bool:
        return permission in self._all_permissions

    def __repr__(self) -> str:
        return f"PermissionCatalog(version={self._version!r}, roles={len(self._roles)}, permissions={len(self._all_permissions)})"
