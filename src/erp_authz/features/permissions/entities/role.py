"""Role definition entity for the permissions feature.

Describes a catalog role with its scope, privilege level and
classification. Levels are fixed by the catalog and never change at runtime.
"""

import re
from dataclasses import dataclass
from typing import Any, Mapping

from ....core.exceptions import CatalogLoadError
from ....config.constants import RoleScope, RoleCategory


ROLE_CODE_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]*$")


@dataclass(frozen=True)
class RoleDefinition:
    """Immutable description of a catalog role."""

    code: str
    name: str
    level: int
    category: RoleCategory
    scope: RoleScope = RoleScope.TENANT
    description: str = ""

    def __post_init__(self):
        """Validate role code and level."""
        if not self.code or not ROLE_CODE_PATTERN.match(self.code):
            raise CatalogLoadError(f"Invalid role code: {self.code!r}")
        if isinstance(self.level, bool) or not isinstance(self.level, int) or self.level < 0:
            raise CatalogLoadError(f"Role {self.code} must have a non-negative integer level, got: {self.level!r}")

    @classmethod
    def from_record(cls, code: str, record: Mapping[str, Any]) -> "RoleDefinition":
        """Build a role definition from a catalog record."""
        try:
            return cls(
                code=code,
                name=record.get("name", code),
                level=record["level"],
                category=RoleCategory(record["category"]),
                scope=RoleScope(record.get("scope", RoleScope.TENANT.value)),
                description=record.get("description", ""),
            )
        except KeyError as e:
            raise CatalogLoadError(f"Role {code} is missing required attribute {e}") from e
        except ValueError as e:
            raise CatalogLoadError(f"Role {code} has an invalid attribute: {e}") from e

    @property
    def is_administrative(self) -> bool:
        return self.category == RoleCategory.ADMINISTRATIVE

    @property
    def is_operational(self) -> bool:
        return self.category == RoleCategory.OPERATIONAL

    @property
    def is_observer(self) -> bool:
        return self.category == RoleCategory.OBSERVER

    def __str__(self) -> str:
        return self.code
