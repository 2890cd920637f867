"""Tests for cross-field checks."""

from datetime import date

import pytest

from erp_authz.config.constants import Severity
from erp_authz.core.exceptions import ConfigurationError
from erp_authz.features.validation import (
    ConditionalRequiredCheck,
    DateRangeCheck,
    NumericRelationshipCheck,
    PercentageTotalCheck,
)


class TestDateRangeCheck:
    """End date must follow the start date."""

    @pytest.fixture
    def check(self):
        return DateRangeCheck("start_date", "end_date")

    def test_valid_range(self, check):
        assert check.check({"start_date": "2026-01-01", "end_date": "2026-02-01"}) is None

    def test_equal_dates_allowed(self, check):
        assert check.check({"start_date": date(2026, 1, 1), "end_date": date(2026, 1, 1)}) is None

    def test_equal_dates_rejected_when_strict(self):
        check = DateRangeCheck("start_date", "end_date", allow_equal=False)
        issue = check.check({"start_date": "2026-01-01", "end_date": "2026-01-01"})
        assert issue.code == "INVALID_DATE_RANGE"

    def test_inverted_range(self, check):
        issue = check.check({"start_date": "2026-03-01", "end_date": "2026-02-01"})
        assert issue.field == "end_date"
        assert issue.code == "INVALID_DATE_RANGE"
        assert issue.value == "2026-02-01"

    def test_mixed_date_and_datetime(self, check):
        assert check.check({"start_date": date(2026, 1, 1), "end_date": "2026-01-02T08:00:00"}) is None

    def test_missing_values_skip(self, check):
        assert check.check({"start_date": "2026-03-01"}) is None

    def test_unparseable_value(self, check):
        assert check.check({"start_date": "2026-03-01", "end_date": "soon"}).code == "INVALID_DATE_RANGE"


class TestConditionalRequiredCheck:
    """A field required only under a condition."""

    @pytest.fixture
    def check(self):
        return ConditionalRequiredCheck("rejection_reason", when_field="status", when_value="REJECTED")

    def test_required_when_condition_holds(self, check):
        issue = check.check({"status": "REJECTED", "rejection_reason": "  "})
        assert issue.code == "CONDITIONAL_FIELD_REQUIRED"
        assert issue.field == "rejection_reason"

    def test_satisfied(self, check):
        assert check.check({"status": "REJECTED", "rejection_reason": "Over budget"}) is None

    def test_not_required_otherwise(self, check):
        assert check.check({"status": "APPROVED"}) is None


class TestNumericRelationshipCheck:
    """Numeric comparison between two fields."""

    def test_discount_within_subtotal(self):
        check = NumericRelationshipCheck("discount", "subtotal", "lte")
        assert check.check({"discount": 10, "subtotal": "100.50"}) is None

    def test_violation(self):
        check = NumericRelationshipCheck("discount", "subtotal", "lte", severity=Severity.WARNING)
        issue = check.check({"discount": 200, "subtotal": 100})
        assert issue.code == "INVALID_NUMERIC_RELATIONSHIP"
        assert issue.severity == Severity.WARNING
        assert "less than or equal to" in issue.message

    def test_unknown_operator(self):
        with pytest.raises(ConfigurationError):
            NumericRelationshipCheck("a", "b", "between")

    def test_missing_values_skip(self):
        assert NumericRelationshipCheck("a", "b", "gt").check({"a": 1}) is None


class TestPercentageTotalCheck:
    """Percentages must not exceed the maximum."""

    @pytest.fixture
    def check(self):
        return PercentageTotalCheck(["labor_pct", "material_pct", "overhead_pct"])

    def test_within_limit(self, check):
        assert check.check({"labor_pct": 50, "material_pct": 30, "overhead_pct": 20}) is None

    def test_exceeded(self, check):
        issue = check.check({"labor_pct": 60, "material_pct": "30", "overhead_pct": 20})
        assert issue.code == "PERCENTAGE_TOTAL_EXCEEDED"
        assert issue.value == 110.0

    def test_missing_fields_ignored(self, check):
        assert check.check({"labor_pct": 90}) is None
