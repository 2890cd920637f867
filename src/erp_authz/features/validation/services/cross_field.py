"""Cross-field checks evaluated in the semantic stage.

Each check inspects two or more fields of the candidate entity and returns
an issue when their relationship does not hold. Checks skip silently when
the values they compare are missing.
"""

import operator
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Union

from ....config.constants import IssueCode, Severity
from ....core.exceptions import ConfigurationError
from ..entities import ValidationIssue
from .values import get_value, is_blank, to_comparable


COMPARATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "lt": operator.lt,
    "lte": operator.le,
    "gt": operator.gt,
    "gte": operator.ge,
    "eq": operator.eq,
}

COMPARATOR_LABELS = {
    "lt": "less than",
    "lte": "less than or equal to",
    "gt": "greater than",
    "gte": "greater than or equal to",
    "eq": "equal to",
}


@dataclass(frozen=True)
class DateRangeCheck:
    """End date must not precede the start date."""

    start_field: str
    end_field: str
    allow_equal: bool = True
    message: Optional[str] = None
    severity: Severity = Severity.ERROR

    def check(self, entity: Mapping[str, Any]) -> Optional[ValidationIssue]:
        start = get_value(entity, self.start_field)
        end = get_value(entity, self.end_field)
        if is_blank(start) or is_blank(end):
            return None

        try:
            start_value = to_comparable(start)
            end_value = to_comparable(end, like=start_value)
            valid = end_value >= start_value if self.allow_equal else end_value > start_value
        except TypeError:
            valid = False

        if valid:
            return None
        return ValidationIssue(
            field=self.end_field,
            code=IssueCode.INVALID_DATE_RANGE,
            message=self.message or f"{self.end_field} must be after {self.start_field}",
            severity=self.severity,
            value=end,
        )


@dataclass(frozen=True)
class ConditionalRequiredCheck:
    """A field becomes required when another field holds a given value."""

    field: str
    when_field: str
    when_value: Any
    message: Optional[str] = None
    severity: Severity = Severity.ERROR

    def check(self, entity: Mapping[str, Any]) -> Optional[ValidationIssue]:
        if get_value(entity, self.when_field) != self.when_value:
            return None
        if not is_blank(get_value(entity, self.field)):
            return None
        return ValidationIssue(
            field=self.field,
            code=IssueCode.CONDITIONAL_FIELD_REQUIRED,
            message=self.message or f"{self.field} is required when {self.when_field} is {self.when_value}",
            severity=self.severity,
        )


@dataclass(frozen=True)
class NumericRelationshipCheck:
    """``field <op> other_field`` must hold, e.g. discount lte subtotal."""

    field: str
    other_field: str
    operator: str = "lte"
    message: Optional[str] = None
    severity: Severity = Severity.ERROR

    def __post_init__(self):
        if self.operator not in COMPARATORS:
            raise ConfigurationError(f"Unknown numeric relationship operator: {self.operator!r}")

    def check(self, entity: Mapping[str, Any]) -> Optional[ValidationIssue]:
        value = get_value(entity, self.field)
        other = get_value(entity, self.other_field)
        if is_blank(value) or is_blank(other):
            return None

        try:
            left = to_comparable(value, like=0)
            right = to_comparable(other, like=0)
            valid = COMPARATORS[self.operator](left, right)
        except TypeError:
            valid = False

        if valid:
            return None
        return ValidationIssue(
            field=self.field,
            code=IssueCode.INVALID_NUMERIC_RELATIONSHIP,
            message=self.message or f"{self.field} must be {COMPARATOR_LABELS[self.operator]} {self.other_field}",
            severity=self.severity,
            value=value,
        )


@dataclass(frozen=True)
class PercentageTotalCheck:
    """Sum of percentage fields must not exceed the maximum."""

    fields: Sequence[str]
    maximum: Union[int, float] = 100
    message: Optional[str] = None
    severity: Severity = Severity.ERROR

    def check(self, entity: Mapping[str, Any]) -> Optional[ValidationIssue]:
        total = 0.0
        for name in self.fields:
            value = get_value(entity, name)
            if is_blank(value):
                continue
            try:
                total += float(to_comparable(value, like=0))
            except TypeError:
                continue

        if total <= self.maximum:
            return None
        return ValidationIssue(
            field=",".join(self.fields),
            code=IssueCode.PERCENTAGE_TOTAL_EXCEEDED,
            message=self.message or f"Total of {', '.join(self.fields)} cannot exceed {self.maximum}%",
            severity=self.severity,
            value=total,
        )


CrossFieldCheck = Union[DateRangeCheck, ConditionalRequiredCheck, NumericRelationshipCheck, PercentageTotalCheck]
