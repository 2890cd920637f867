"""Validation issue value object."""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from ....config.constants import IssueCode, Severity


@dataclass(frozen=True)
class ValidationIssue:
    """A single problem found during validation.

    ``code`` is stable so presentation layers can localize messages;
    ``field`` is a dotted path into the payload.
    """

    field: str
    code: str
    message: str
    severity: Severity = Severity.ERROR
    value: Optional[Any] = None

    def __post_init__(self):
        if isinstance(self.code, IssueCode):
            object.__setattr__(self, "code", self.code.value)
        if not isinstance(self.severity, Severity):
            object.__setattr__(self, "severity", Severity(self.severity))

    @classmethod
    def error(cls, field: str, code: Union[str, IssueCode], message: str, value: Any = None) -> "ValidationIssue":
        return cls(field=field, code=code, message=message, severity=Severity.ERROR, value=value)

    @classmethod
    def warning(cls, field: str, code: Union[str, IssueCode], message: str, value: Any = None) -> "ValidationIssue":
        return cls(field=field, code=code, message=message, severity=Severity.WARNING, value=value)

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "field": self.field,
            "code": self.code,
            "message": self.message,
            "severity": self.severity.value,
        }
        if self.value is not None:
            data["value"] = self.value
        return data
