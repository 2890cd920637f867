"""Tests for the role hierarchy service."""

import itertools

import pytest

from erp_authz.config.constants import RoleComparison


ALL_ROLES = ["ADMIN", "PROJECT_MANAGER", "WORKER", "VIEWER", "DRIVER"]


class TestLevels:
    """Test levels, comparison and classification."""

    def test_levels(self, hierarchy):
        assert hierarchy.level("ADMIN") == 100
        assert hierarchy.level("PROJECT_MANAGER") == 75
        assert hierarchy.level("WORKER") == 50
        assert hierarchy.level("VIEWER") == 25
        assert hierarchy.level("DRIVER") == 25
        assert hierarchy.level("UNKNOWN") == 0

    def test_compare(self, hierarchy):
        assert hierarchy.compare("ADMIN", "WORKER") == RoleComparison.HIGHER
        assert hierarchy.compare("VIEWER", "WORKER") == RoleComparison.LOWER
        assert hierarchy.compare("VIEWER", "DRIVER") == RoleComparison.EQUAL

    def test_classification(self, hierarchy):
        assert hierarchy.is_administrative("ADMIN")
        assert hierarchy.is_administrative("PROJECT_MANAGER")
        assert hierarchy.is_operational("WORKER")
        assert hierarchy.is_operational("DRIVER")
        assert hierarchy.is_observer("VIEWER")
        assert not hierarchy.is_observer("UNKNOWN")

    def test_top_role(self, hierarchy):
        assert hierarchy.top_role == "ADMIN"

    def test_sorting(self, hierarchy):
        assert hierarchy.sort_by_level(["VIEWER", "ADMIN", "WORKER"]) == ["ADMIN", "WORKER", "VIEWER"]
        assert hierarchy.sort_by_level(["WORKER", "DRIVER"], descending=False) == ["DRIVER", "WORKER"]
        assert hierarchy.highest_role(["DRIVER", "PROJECT_MANAGER"]) == "PROJECT_MANAGER"
        assert hierarchy.highest_role([]) is None


class TestAssignment:
    """Test which roles an actor may grant."""

    def test_admin_assigns_every_role(self, hierarchy):
        assert set(hierarchy.assignable_roles(["ADMIN"])) == set(ALL_ROLES)
        assert hierarchy.can_assign(["ADMIN"], "ADMIN")

    def test_manager_assigns_lower_roles(self, hierarchy):
        assert set(hierarchy.assignable_roles(["PROJECT_MANAGER"])) == {"WORKER", "VIEWER", "DRIVER"}
        assert not hierarchy.can_assign(["PROJECT_MANAGER"], "PROJECT_MANAGER")

    def test_by_level(self, hierarchy):
        assert set(hierarchy.assignable_roles_for_level(50)) == {"VIEWER", "DRIVER"}
        assert hierarchy.assignable_roles_for_level(25) == []

    def test_no_roles(self, hierarchy):
        assert hierarchy.assignable_roles([]) == []


class TestValidateCombination:
    """Test conflict and redundancy detection."""

    def test_admin_and_viewer_conflict(self, hierarchy):
        report = hierarchy.validate_combination(["ADMIN", "VIEWER"])
        assert len(report.conflicts) == 1
        assert not report.is_valid

    def test_manager_and_worker_warns(self, hierarchy):
        report = hierarchy.validate_combination(["PROJECT_MANAGER", "WORKER"])
        assert len(report.conflicts) == 0
        assert len(report.warnings) == 1
        assert report.is_valid

    def test_admin_and_manager_redundant(self, hierarchy):
        report = hierarchy.validate_combination(["ADMIN", "PROJECT_MANAGER"])
        assert report.conflicts == []
        assert report.warnings == ["PROJECT_MANAGER role is redundant when ADMIN role is present"]

    def test_same_level_roles(self, hierarchy):
        report = hierarchy.validate_combination(["VIEWER", "DRIVER"])
        assert report.conflicts == []
        assert len(report.warnings) == 1
        assert "level 25" in report.warnings[0]

    def test_single_role_is_clean(self, hierarchy):
        report = hierarchy.validate_combination(["WORKER"])
        assert report.conflicts == [] and report.warnings == []

    def test_duplicates_ignored(self, hierarchy):
        report = hierarchy.validate_combination(["ADMIN", "VIEWER", "VIEWER"])
        assert len(report.conflicts) == 1

    def test_unknown_role_warns(self, hierarchy):
        report = hierarchy.validate_combination(["WORKER", "GHOST"])
        assert len(report.warnings) == 1
        assert "GHOST" in report.warnings[0]


class TestOptimize:
    """Test role set collapsing."""

    def test_admin_keeps_only_admin(self, hierarchy):
        result = hierarchy.optimize(["WORKER", "ADMIN", "VIEWER"])
        assert result.optimized == ["ADMIN"]
        assert result.removed == ["WORKER", "VIEWER"]
        assert result.reasons == ["Removed all other roles as ADMIN provides full access"]

    def test_manager_drops_subordinate_roles(self, hierarchy):
        result = hierarchy.optimize(["PROJECT_MANAGER", "WORKER", "DRIVER"])
        assert result.optimized == ["PROJECT_MANAGER"]
        assert set(result.removed) == {"WORKER", "DRIVER"}
        assert len(result.reasons) == 1

    def test_no_manager_keeps_roles(self, hierarchy):
        result = hierarchy.optimize(["WORKER", "VIEWER"])
        assert result.optimized == ["WORKER", "VIEWER"]
        assert result.removed == []
        assert result.reasons == []

    def test_collapses_duplicates(self, hierarchy):
        assert hierarchy.optimize(["WORKER", "WORKER"]).optimized == ["WORKER"]

    @pytest.mark.parametrize(
        "roles",
        [list(c) for n in range(0, 4) for c in itertools.permutations(ALL_ROLES, n)],
    )
    def test_idempotent_and_never_adds(self, hierarchy, roles):
        once = hierarchy.optimize(roles).optimized
        twice = hierarchy.optimize(once).optimized
        assert once == twice
        assert set(once) <= set(roles)
        if "ADMIN" in roles:
            assert once == ["ADMIN"]


class TestTransitionImpact:
    """Test promotion/demotion grading."""

    def test_promotion(self, hierarchy):
        transition = hierarchy.transition_impact(["VIEWER"], ["ADMIN"])
        assert transition.kind == "promotion"
        assert transition.impact == "high"
        assert transition.level_change == 75

    def test_demotion(self, hierarchy):
        transition = hierarchy.transition_impact(["PROJECT_MANAGER"], ["WORKER"])
        assert transition.kind == "demotion"
        assert transition.impact == "medium"

    def test_lateral(self, hierarchy):
        transition = hierarchy.transition_impact(["VIEWER"], ["DRIVER"])
        assert transition.kind == "lateral"
        assert transition.impact == "low"
