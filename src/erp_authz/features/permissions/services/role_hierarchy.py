"""Role hierarchy service.

Orders roles by the privilege levels recorded in the permission catalog and
answers classification, assignment, conflict and redundancy questions.
Holds no mutable state, so one instance is shared across requests.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ....config.constants import RoleComparison, RoleLevelThresholds
from ..entities import PermissionCatalog, RoleDefinition


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoleCombinationReport:
    """Conflicts and warnings found in a set of co-assigned roles."""

    conflicts: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.conflicts


@dataclass(frozen=True)
class RoleOptimization:
    """Result of collapsing redundant roles."""

    optimized: List[str]
    removed: List[str] = field(default_factory=list)
    reasons: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class RoleTransition:
    """Impact of moving an actor from one role set to another."""

    kind: str
    impact: str
    level_change: int
    from_level: int
    to_level: int


def _unique(roles: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for role in roles:
        if role not in seen:
            seen.add(role)
            result.append(role)
    return result


class RoleHierarchy:
    """Privilege ordering and classification of catalog roles."""

    def __init__(self, catalog: PermissionCatalog):
        self.catalog = catalog
        self._top_role = self._resolve_top_role(catalog)

    @staticmethod
    def _resolve_top_role(catalog: PermissionCatalog) -> Optional[str]:
        administrative = [r for r in catalog.roles if r.is_administrative]
        candidates = administrative or catalog.roles
        return candidates[0].code if candidates else None

    @property
    def top_role(self) -> Optional[str]:
        """Highest-level administrative role."""
        return self._top_role

    def _definition(self, role: str) -> Optional[RoleDefinition]:
        return self.catalog.find_role(role)

    # Levels and comparison

    def level(self, role: str) -> int:
        """Privilege level of a role, 0 when the role is unknown."""
        definition = self._definition(role)
        return definition.level if definition else 0

    def compare(self, role_a: str, role_b: str) -> RoleComparison:
        level_a, level_b = self.level(role_a), self.level(role_b)
        if level_a > level_b:
            return RoleComparison.HIGHER
        if level_a < level_b:
            return RoleComparison.LOWER
        return RoleComparison.EQUAL

    def highest_level(self, roles: Iterable[str]) -> int:
        return max((self.level(r) for r in roles), default=0)

    def highest_role(self, roles: Iterable[str]) -> Optional[str]:
        ordered = self.sort_by_level(roles)
        return ordered[0] if ordered else None

    def sort_by_level(self, roles: Iterable[str], descending: bool = True) -> List[str]:
        """Sort roles by level, ties broken by role code."""
        unique = _unique(roles)
        if descending:
            return sorted(unique, key=lambda r: (-self.level(r), r))
        return sorted(unique, key=lambda r: (self.level(r), r))

    # Classification

    def is_administrative(self, role: str) -> bool:
        definition = self._definition(role)
        return bool(definition and definition.is_administrative)

    def is_operational(self, role: str) -> bool:
        definition = self._definition(role)
        return bool(definition and definition.is_operational)

    def is_observer(self, role: str) -> bool:
        definition = self._definition(role)
        return bool(definition and definition.is_observer)

    # Assignment

    def assignable_roles_for_level(self, actor_level: int) -> List[str]:
        """Roles strictly below the given level.

        The top administrative level may assign every role, itself included.
        """
        if self._top_role is not None and actor_level >= self.level(self._top_role):
            return self.catalog.role_codes
        return [r.code for r in self.catalog.roles if r.level < actor_level]

    def assignable_roles(self, actor_roles: Iterable[str]) -> List[str]:
        """Roles an actor holding ``actor_roles`` may grant to others."""
        return self.assignable_roles_for_level(self.highest_level(actor_roles))

    def can_assign(self, actor_roles: Iterable[str], target_role: str) -> bool:
        return target_role in self.assignable_roles(actor_roles)

    # Combination analysis

    def validate_combination(self, roles: Iterable[str]) -> RoleCombinationReport:
        """Detect contradictory and redundant role pairings.

        An administrative role next to an observer-only role is a conflict.
        An administrative role next to a lower non-observer role, or several
        non-administrative roles sharing a level, produce warnings.
        """
        unique = _unique(roles)
        conflicts: List[str] = []
        warnings: List[str] = []

        for role in unique:
            if self._definition(role) is None:
                warnings.append(f"Unknown role {role} is not defined in catalog {self.catalog.version}")

        for role in unique:
            if not self.is_administrative(role):
                continue
            for other in unique:
                if other == role:
                    continue
                if self.is_observer(other):
                    conflicts.append(
                        f"{role} and {other} cannot be combined: administrative and observer-only roles are contradictory"
                    )
                elif self._definition(other) is not None and self.level(other) < self.level(role):
                    warnings.append(f"{other} role is redundant when {role} role is present")

        by_level: Dict[int, List[str]] = defaultdict(list)
        for role in unique:
            if self._definition(role) is not None and not self.is_administrative(role):
                by_level[self.level(role)].append(role)
        for level, same_level in sorted(by_level.items(), reverse=True):
            if len(same_level) > 1:
                warnings.append(f"Multiple roles at level {level} assigned: {', '.join(same_level)}")

        if conflicts:
            logger.debug(f"Role combination {unique} has conflicts: {conflicts}")
        return RoleCombinationReport(conflicts=conflicts, warnings=warnings)

    def optimize(self, roles: Iterable[str]) -> RoleOptimization:
        """Remove roles made redundant by a higher role in the same set.

        The top administrative role subsumes every other role. Otherwise the
        highest administrative role present drops lower non-administrative
        roles. Applying the optimization twice gives the same result.
        """
        unique = _unique(roles)

        if self._top_role is not None and self._top_role in unique:
            removed = [r for r in unique if r != self._top_role]
            reasons = [f"Removed all other roles as {self._top_role} provides full access"] if removed else []
            return RoleOptimization(optimized=[self._top_role], removed=removed, reasons=reasons)

        managers = [r for r in unique if self.is_administrative(r)]
        if not managers:
            return RoleOptimization(optimized=unique)

        manager = self.highest_role(managers)
        manager_level = self.level(manager)
        removed = [r for r in unique if not self.is_administrative(r) and self.level(r) < manager_level]
        optimized = [r for r in unique if r not in removed]
        reasons = []
        if removed:
            reasons.append(f"Removed {', '.join(removed)} as {manager} provides broader access")
        return RoleOptimization(optimized=optimized, removed=removed, reasons=reasons)

    def transition_impact(self, from_roles: Iterable[str], to_roles: Iterable[str]) -> RoleTransition:
        """Classify a role change as promotion, demotion or lateral move."""
        from_level = self.highest_level(from_roles)
        to_level = self.highest_level(to_roles)
        change = to_level - from_level

        if change > 0:
            kind = "promotion"
        elif change < 0:
            kind = "demotion"
        else:
            kind = "lateral"

        magnitude = abs(change)
        if magnitude >= RoleLevelThresholds.HIGH_IMPACT:
            impact = "high"
        elif magnitude >= RoleLevelThresholds.MEDIUM_IMPACT:
            impact = "medium"
        else:
            impact = "low"

        return RoleTransition(kind=kind, impact=impact, level_change=change, from_level=from_level, to_level=to_level)
