"""Guard expression tree.

A guard is a small tagged tree: leaves test a role, a permission or a custom
predicate, and AllOf/AnyOf nodes combine children. Nodes nest freely.
An AllOf or AnyOf without children grants access.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Mapping, Sequence, Tuple, Union

from ....config.constants import GuardOperator
from ....core.exceptions import ConfigurationError
from .actor_context import ActorContext


GuardPredicate = Callable[[ActorContext], Union[bool, Awaitable[bool]]]


@dataclass(frozen=True)
class RoleLeaf:
    """Satisfied when the actor holds the role."""

    role: str


@dataclass(frozen=True)
class PermissionLeaf:
    """Satisfied when the actor holds the permission."""

    permission: str


@dataclass(frozen=True)
class PredicateLeaf:
    """Satisfied when the predicate returns a truthy value for the actor."""

    predicate: GuardPredicate
    name: str = ""

    def __post_init__(self):
        if not callable(self.predicate):
            raise ConfigurationError(f"Guard predicate must be callable, got: {self.predicate!r}")
        if not self.name:
            object.__setattr__(self, "name", getattr(self.predicate, "__name__", "predicate"))


@dataclass(frozen=True)
class AllOf:
    """Every child must be satisfied."""

    children: Tuple["GuardNode", ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "children", tuple(self.children))


@dataclass(frozen=True)
class AnyOf:
    """At least one child must be satisfied; no children grants access."""

    children: Tuple["GuardNode", ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "children", tuple(self.children))


GuardNode = Union[RoleLeaf, PermissionLeaf, PredicateLeaf, AllOf, AnyOf]


def all_of(*children: GuardNode) -> AllOf:
    return AllOf(children)


def any_of(*children: GuardNode) -> AnyOf:
    return AnyOf(children)


def guard_from_mapping(
    spec: Mapping[str, Any],
    predicates: Iterable[GuardPredicate] = (),
) -> Union[AllOf, AnyOf]:
    """Build a single-level guard from a declarative mapping.

    Args:
        spec: Mapping with optional ``roles``, ``permissions`` lists and an
            ``operator`` of "AND" or "OR" (default "OR")
        predicates: Custom predicates added as leaves

    Returns:
        AllOf for AND, AnyOf for OR
    """
    try:
        operator = GuardOperator(str(spec.get("operator", GuardOperator.OR.value)).upper())
    except ValueError as e:
        raise ConfigurationError(f"Unknown guard operator: {spec.get('operator')!r}") from e

    leaves = []
    leaves.extend(RoleLeaf(role) for role in _as_list(spec.get("roles")))
    leaves.extend(PermissionLeaf(permission) for permission in _as_list(spec.get("permissions")))
    leaves.extend(PredicateLeaf(predicate) for predicate in predicates)

    if operator == GuardOperator.AND:
        return AllOf(leaves)
    return AnyOf(leaves)


def _as_list(value: Any) -> Sequence[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)
