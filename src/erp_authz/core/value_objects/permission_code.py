"""Permission code value object.

Permissions are atomic ``Resource.action`` strings. The resource is a domain
noun in PascalCase and the action comes from the closed PermissionAction set.
There is no wildcard matching.
"""

import re
from dataclasses import dataclass
from typing import Union

from ...config.constants import PermissionAction
from ..exceptions import InvalidPermissionCodeError


RESOURCE_PATTERN = re.compile(r"^[A-Z][A-Za-z0-9]*$")


@dataclass(frozen=True)
class PermissionCode:
    """Immutable value object for a permission identifier with validation."""

    value: str

    def __post_init__(self):
        """Validate permission code format: Resource.action"""
        if not isinstance(self.value, str) or "." not in self.value:
            raise InvalidPermissionCodeError(
                f"Permission code must be in format 'Resource.action', got: {self.value!r}"
            )

        parts = self.value.split(".")
        if len(parts) != 2:
            raise InvalidPermissionCodeError(f"Permission code must have exactly one dot, got: {self.value}")

        resource, action = parts
        if not RESOURCE_PATTERN.match(resource):
            raise InvalidPermissionCodeError(f"Invalid permission resource '{resource}' in {self.value}")
        if action not in PermissionAction._value2member_map_:
            raise InvalidPermissionCodeError(f"Unknown permission action '{action}' in {self.value}")

    @classmethod
    def of(cls, resource: str, action: Union[str, PermissionAction]) -> "PermissionCode":
        """Build a permission code from its parts."""
        action_value = action.value if isinstance(action, PermissionAction) else action
        return cls(f"{resource}.{action_value}")

    @property
    def resource(self) -> str:
        """Extract resource part from permission code."""
        return self.value.split(".")[0]

    @property
    def action(self) -> PermissionAction:
        """Extract action part from permission code."""
        return PermissionAction(self.value.split(".")[1])

    def __str__(self) -> str:
        return self.value
