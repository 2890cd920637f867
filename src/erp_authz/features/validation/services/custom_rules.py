"""Registry of named custom rule predicates.

Predicates receive the entity snapshot and the validation context and
return a bool or an awaitable bool. They are registered at startup; a rule
naming an unregistered predicate is a configuration defect.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

from ....core.exceptions import RuleConfigurationError
from ..entities import ValidationContext


logger = logging.getLogger(__name__)

CustomPredicate = Callable[[Mapping[str, Any], ValidationContext], Union[bool, Awaitable[bool]]]


class CustomRuleRegistry:
    """Name -> predicate mapping used by CUSTOM_RULE rules."""

    def __init__(self, predicates: Optional[Dict[str, CustomPredicate]] = None):
        self._predicates: Dict[str, CustomPredicate] = {}
        for name, predicate in (predicates or {}).items():
            self.register(name, predicate)

    def register(self, name: str, predicate: Optional[CustomPredicate] = None):
        """Register a predicate, or return a decorator when none is given."""
        if predicate is None:
            def decorator(func: CustomPredicate) -> CustomPredicate:
                self.register(name, func)
                return func
            return decorator

        if not name:
            raise RuleConfigurationError("Custom rule name cannot be empty")
        if not callable(predicate):
            raise RuleConfigurationError(f"Custom rule '{name}' must be callable")
        if name in self._predicates:
            logger.warning(f"Replacing custom rule predicate '{name}'")
        self._predicates[name] = predicate
        return predicate

    def unregister(self, name: str) -> None:
        self._predicates.pop(name, None)

    def get(self, name: str) -> CustomPredicate:
        try:
            return self._predicates[name]
        except KeyError:
            raise RuleConfigurationError(
                f"Custom rule predicate '{name}' is not registered",
                details={"predicate": name},
            ) from None

    def names(self) -> List[str]:
        return sorted(self._predicates)

    def __contains__(self, name: object) -> bool:
        return name in self._predicates

    def __len__(self) -> int:
        return len(self._predicates)
