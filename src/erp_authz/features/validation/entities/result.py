"""Validation result returned to controllers.

A result is either successful (data plus non-error issues) or failed
(at least one ERROR issue). A successful result never carries an ERROR.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Iterable, List, Optional, Tuple, TypeVar

from ....config.constants import Severity
from .issues import ValidationIssue


T = TypeVar("T")


@dataclass(frozen=True)
class ValidationResult(Generic[T]):
    """Aggregated outcome of a validation call."""

    success: bool
    data: Optional[T] = None
    errors: Tuple[ValidationIssue, ...] = field(default_factory=tuple)
    warnings: Tuple[ValidationIssue, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "errors", tuple(self.errors))
        object.__setattr__(self, "warnings", tuple(self.warnings))

        if any(issue.is_error for issue in self.warnings):
            raise ValueError("ERROR-severity issues belong in errors, not warnings")
        if self.success and self.errors:
            raise ValueError("A successful validation result cannot carry errors")
        if not self.success and not self.errors:
            raise ValueError("A failed validation result needs at least one error")

    @classmethod
    def ok(cls, data: T, warnings: Iterable[ValidationIssue] = ()) -> "ValidationResult[T]":
        return cls(success=True, data=data, warnings=tuple(warnings))

    @classmethod
    def fail(
        cls,
        errors: Iterable[ValidationIssue],
        warnings: Iterable[ValidationIssue] = (),
    ) -> "ValidationResult[T]":
        return cls(success=False, errors=tuple(errors), warnings=tuple(warnings))

    @classmethod
    def from_issues(cls, data: T, issues: Iterable[ValidationIssue]) -> "ValidationResult[T]":
        """Partition issues by severity; any ERROR makes the result fail."""
        errors: List[ValidationIssue] = []
        warnings: List[ValidationIssue] = []
        for issue in issues:
            (errors if issue.severity == Severity.ERROR else warnings).append(issue)
        if errors:
            return cls.fail(errors, warnings)
        return cls.ok(data, warnings)

    @property
    def issues(self) -> List[ValidationIssue]:
        return list(self.errors) + list(self.warnings)

    def issues_for(self, field_path: str) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.field == field_path]

    def codes(self) -> List[str]:
        return [issue.code for issue in self.issues]

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {
                "success": True,
                "data": self.data,
                "warnings": [w.to_dict() for w in self.warnings],
            }
        return {
            "success": False,
            "errors": [e.to_dict() for e in self.errors],
        }


def combine(results: Iterable[ValidationResult]) -> ValidationResult[List[Any]]:
    """Merge per-item results of a bulk validation into one result."""
    data: List[Any] = []
    errors: List[ValidationIssue] = []
    warnings: List[ValidationIssue] = []
    for index, result in enumerate(results):
        data.append(result.data)
        errors.extend(_prefixed(index, result.errors))
        warnings.extend(_prefixed(index, result.warnings))
    if errors:
        return ValidationResult.fail(errors, warnings)
    return ValidationResult.ok(data, warnings)


def _prefixed(index: int, issues: Iterable[ValidationIssue]) -> List[ValidationIssue]:
    return [
        ValidationIssue(
            field=f"[{index}].{issue.field}" if issue.field else f"[{index}]",
            code=issue.code,
            message=issue.message,
            severity=issue.severity,
            value=issue.value,
        )
        for issue in issues
    ]
