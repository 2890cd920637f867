"""Business rule records.

Rules are tenant-scoped configuration created by administrators and
evaluated read-only. ``tenant_id`` of None marks a global rule.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional, Union

from ....config.constants import DEFAULT_RULE_CODES, RuleType, Severity
from ....core.exceptions import RuleConfigurationError
from .context import ValidationContext


Bound = Union[int, float, date, datetime]


@dataclass(frozen=True)
class RangeCondition:
    """Numeric or date bounds, inclusive unless stated otherwise."""

    min: Optional[Bound] = None
    max: Optional[Bound] = None
    min_inclusive: bool = True
    max_inclusive: bool = True

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RangeCondition":
        return cls(
            min=_parse_bound(data.get("min")),
            max=_parse_bound(data.get("max")),
            min_inclusive=bool(data.get("min_inclusive", True)),
            max_inclusive=bool(data.get("max_inclusive", True)),
        )

    def describe(self) -> str:
        low = "[" if self.min_inclusive else "("
        high = "]" if self.max_inclusive else ")"
        lower = "-inf" if self.min is None else str(self.min)
        upper = "+inf" if self.max is None else str(self.max)
        return f"{low}{lower}, {upper}{high}"


@dataclass(frozen=True)
class PermissionCondition:
    """Permission gate, optionally bound to a resource in the tenant."""

    required_permission: str
    resource_type: Optional[str] = None
    id_field: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PermissionCondition":
        permission = data.get("required_permission") or data.get("requiredPermission")
        if not permission:
            raise RuleConfigurationError("Permission condition needs a required_permission")
        return cls(
            required_permission=permission,
            resource_type=data.get("resource_type") or data.get("resourceType"),
            id_field=data.get("id_field"),
        )


@dataclass(frozen=True)
class BusinessRule:
    """A configured constraint evaluated by the rule engine."""

    id: str
    type: RuleType
    field: str
    error_code: Optional[str] = None
    error_message: str = ""
    condition: Any = None
    table: Optional[str] = None
    severity: Severity = Severity.ERROR
    is_active: bool = True
    tenant_id: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.type, RuleType):
            try:
                object.__setattr__(self, "type", RuleType(self.type))
            except ValueError:
                raise RuleConfigurationError(f"Unknown rule type: {self.type!r}", rule_id=self.id) from None
        if not isinstance(self.severity, Severity):
            try:
                object.__setattr__(self, "severity", Severity(self.severity))
            except ValueError:
                raise RuleConfigurationError(f"Unknown rule severity: {self.severity!r}", rule_id=self.id) from None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "BusinessRule":
        """Parse a persisted rule record.

        Accepts snake_case or camelCase keys. The condition is converted to
        the structure its rule type expects.
        """
        def pick(*keys, default=None):
            for key in keys:
                if key in record and record[key] is not None:
                    return record[key]
            return default

        rule_id = str(pick("id", default=""))
        raw_type = pick("type", "rule_type", "ruleType")
        try:
            rule_type = RuleType(raw_type)
        except ValueError:
            raise RuleConfigurationError(f"Unknown rule type: {raw_type!r}", rule_id=rule_id) from None

        condition = pick("condition")
        if rule_type == RuleType.RANGE_CONSTRAINT and isinstance(condition, Mapping):
            condition = RangeCondition.from_mapping(condition)
        elif rule_type == RuleType.PERMISSION_CONSTRAINT:
            if isinstance(condition, Mapping):
                merged = dict(condition)
            else:
                merged = {}
            for key in ("required_permission", "requiredPermission", "resource_type", "resourceType"):
                if key in record and key not in merged:
                    merged[key] = record[key]
            condition = PermissionCondition.from_mapping(merged)
        elif rule_type == RuleType.CUSTOM_RULE and isinstance(condition, Mapping):
            condition = condition.get("predicate") or condition.get("name")

        return cls(
            id=rule_id,
            type=rule_type,
            field=pick("field", default=""),
            error_code=pick("error_code", "errorCode"),
            error_message=pick("error_message", "errorMessage", default=""),
            condition=condition,
            table=pick("table"),
            severity=pick("severity", default=Severity.ERROR),
            is_active=_parse_flag(pick("is_active", "isActive", default=True), rule_id),
            tenant_id=pick("tenant_id", "tenantId"),
        )

    @property
    def issue_code(self) -> str:
        """Error code of the rule, falling back to its type's default."""
        if self.error_code:
            return self.error_code
        return DEFAULT_RULE_CODES[self.type].value

    def applies_to(self, context: ValidationContext) -> bool:
        """Active and either global or owned by the context's tenant."""
        if not self.is_active:
            return False
        if self.tenant_id is None:
            return True
        return context.tenant_id is not None and str(self.tenant_id) == str(context.tenant_id)


def _parse_bound(value: Any) -> Optional[Bound]:
    """Accept numbers, dates and ISO date strings as range bounds."""
    if value is None or isinstance(value, (int, float, date, datetime)):
        return value
    if isinstance(value, str):
        try:
            if "T" in value or " " in value:
                return datetime.fromisoformat(value)
            return date.fromisoformat(value)
        except ValueError:
            pass
        try:
            return float(value)
        except ValueError:
            raise RuleConfigurationError(f"Invalid range bound: {value!r}") from None
    raise RuleConfigurationError(f"Invalid range bound: {value!r}")


TRUE_STRINGS = frozenset({"true", "t", "yes", "y", "on", "1"})
FALSE_STRINGS = frozenset({"false", "f", "no", "n", "off", "0"})


def _parse_flag(value: Any, rule_id: str) -> bool:
    """Parse a persisted boolean; strings such as "false" and "0" are False."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in TRUE_STRINGS:
            return True
        if normalized in FALSE_STRINGS:
            return False
    raise RuleConfigurationError(f"Invalid is_active flag: {value!r}", rule_id=rule_id)
