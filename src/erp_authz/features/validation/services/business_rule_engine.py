"""Business rule engine.

Evaluates typed rule records against an entity snapshot. Only
UNIQUE_CONSTRAINT and resource-bound PERMISSION_CONSTRAINT rules touch the
store, always through the tenant-scoped executor.
"""

import inspect
import logging
from typing import Any, Iterable, List, Mapping, Optional

from ....config.constants import RuleType
from ....core.exceptions import (
    InvalidPermissionCodeError,
    MissingTenantError,
    RuleConfigurationError,
    UnknownPermissionError,
)
from ....core.value_objects import PermissionCode
from ...permissions.entities import ActorContext
from ...permissions.services import AuthorizationEngine
from ..entities import (
    BusinessRule,
    PermissionCondition,
    RangeCondition,
    TenantQueries,
    TenantScopedStore,
    ValidationContext,
    ValidationIssue,
)
from .custom_rules import CustomRuleRegistry
from .values import get_value, is_blank, to_comparable


logger = logging.getLogger(__name__)


class BusinessRuleEngine:
    """Dispatches rule evaluation on the rule type."""

    def __init__(
        self,
        authorization: AuthorizationEngine,
        store: Optional[TenantScopedStore] = None,
        registry: Optional[CustomRuleRegistry] = None,
    ):
        self.authorization = authorization
        self.store = store
        self.registry = registry if registry is not None else CustomRuleRegistry()

    # Configuration

    def applicable_rules(self, rules: Iterable[BusinessRule], context: ValidationContext) -> List[BusinessRule]:
        """Active rules that are global or belong to the context's tenant."""
        return [rule for rule in rules if rule.applies_to(context)]

    def ensure_configured(self, rules: Iterable[BusinessRule]) -> None:
        """Raise RuleConfigurationError for the first misconfigured rule."""
        for rule in rules:
            try:
                self._check_rule(rule)
            except RuleConfigurationError as e:
                logger.error(f"Business rule {rule.id} is misconfigured: {e.message}")
                raise

    def _check_rule(self, rule: BusinessRule) -> None:
        if rule.type == RuleType.REQUIRED_FIELD:
            if not rule.field:
                raise RuleConfigurationError("REQUIRED_FIELD rule needs a field", rule_id=rule.id)
        elif rule.type == RuleType.UNIQUE_CONSTRAINT:
            if not rule.field or not rule.table:
                raise RuleConfigurationError("UNIQUE_CONSTRAINT rule needs a field and a table", rule_id=rule.id)
            if self.store is None:
                raise RuleConfigurationError("UNIQUE_CONSTRAINT rule needs a tenant-scoped store", rule_id=rule.id)
        elif rule.type == RuleType.RANGE_CONSTRAINT:
            if not isinstance(rule.condition, RangeCondition):
                raise RuleConfigurationError("RANGE_CONSTRAINT rule needs a RangeCondition", rule_id=rule.id)
            if rule.condition.min is None and rule.condition.max is None:
                raise RuleConfigurationError("RANGE_CONSTRAINT rule needs at least one bound", rule_id=rule.id)
        elif rule.type == RuleType.PERMISSION_CONSTRAINT:
            condition = rule.condition
            if not isinstance(condition, PermissionCondition):
                raise RuleConfigurationError("PERMISSION_CONSTRAINT rule needs a PermissionCondition", rule_id=rule.id)
            try:
                PermissionCode(condition.required_permission)
                self.authorization.catalog.ensure_permission(condition.required_permission)
            except (InvalidPermissionCodeError, UnknownPermissionError) as e:
                raise RuleConfigurationError(
                    f"PERMISSION_CONSTRAINT rule names an invalid permission: {condition.required_permission}",
                    rule_id=rule.id,
                ) from e
            if condition.resource_type and self.store is None:
                raise RuleConfigurationError(
                    "PERMISSION_CONSTRAINT rule with a resource type needs a tenant-scoped store",
                    rule_id=rule.id,
                )
        elif rule.type == RuleType.CUSTOM_RULE:
            if not isinstance(rule.condition, str) or not rule.condition:
                raise RuleConfigurationError("CUSTOM_RULE rule needs a predicate name", rule_id=rule.id)
            if rule.condition not in self.registry:
                raise RuleConfigurationError(
                    f"Custom rule predicate '{rule.condition}' is not registered",
                    rule_id=rule.id,
                )
        else:
            raise RuleConfigurationError(f"Unknown rule type: {rule.type!r}", rule_id=rule.id)

    # Evaluation

    async def evaluate(
        self,
        rule: BusinessRule,
        entity: Mapping[str, Any],
        context: ValidationContext,
        actor: Optional[ActorContext] = None,
    ) -> bool:
        """Evaluate one rule; True when the entity satisfies it.

        Raises:
            RuleConfigurationError: For an unknown type or unregistered predicate
            MissingTenantError: When a store-backed rule has no tenant
        """
        if rule.type == RuleType.REQUIRED_FIELD:
            return not is_blank(get_value(entity, rule.field))
        if rule.type == RuleType.UNIQUE_CONSTRAINT:
            return await self._evaluate_unique(rule, entity, context)
        if rule.type == RuleType.RANGE_CONSTRAINT:
            return self._evaluate_range(rule, entity)
        if rule.type == RuleType.PERMISSION_CONSTRAINT:
            return await self._evaluate_permission(rule, entity, context, actor)
        if rule.type == RuleType.CUSTOM_RULE:
            return await self._evaluate_custom(rule, entity, context)
        raise RuleConfigurationError(f"Unknown rule type: {rule.type!r}", rule_id=rule.id)

    async def _evaluate_unique(self, rule: BusinessRule, entity: Mapping[str, Any], context: ValidationContext) -> bool:
        value = get_value(entity, rule.field)
        if is_blank(value):
            return True
        if self.store is None:
            raise RuleConfigurationError("UNIQUE_CONSTRAINT rule needs a tenant-scoped store", rule_id=rule.id)
        if not context.tenant_id:
            raise MissingTenantError(f"Uniqueness of {rule.field} cannot be checked without a tenant")

        exclude_id = entity.get("id") or context.entity_id

        async def find(queries: TenantQueries):
            return await queries.find_conflict(rule.table, rule.field, value, exclude_id)

        conflict = await self.store.with_tenant_rls(context.tenant_id, find)
        if conflict is not None:
            logger.debug(f"[{context.correlation_id}] {rule.table}.{rule.field} conflicts with record {conflict}")
        return conflict is None

    def _evaluate_range(self, rule: BusinessRule, entity: Mapping[str, Any]) -> bool:
        condition = rule.condition
        if not isinstance(condition, RangeCondition):
            raise RuleConfigurationError("RANGE_CONSTRAINT rule needs a RangeCondition", rule_id=rule.id)

        value = get_value(entity, rule.field)
        if is_blank(value):
            return True

        try:
            if condition.min is not None:
                lower = to_comparable(value, like=condition.min)
                if lower < condition.min or (lower == condition.min and not condition.min_inclusive):
                    return False
            if condition.max is not None:
                upper = to_comparable(value, like=condition.max)
                if upper > condition.max or (upper == condition.max and not condition.max_inclusive):
                    return False
        except TypeError:
            return False
        return True

    async def _evaluate_permission(
        self,
        rule: BusinessRule,
        entity: Mapping[str, Any],
        context: ValidationContext,
        actor: Optional[ActorContext],
    ) -> bool:
        condition = rule.condition
        if not isinstance(condition, PermissionCondition):
            raise RuleConfigurationError("PERMISSION_CONSTRAINT rule needs a PermissionCondition", rule_id=rule.id)
        if actor is None:
            return False

        if not self.authorization.has_permission(actor, condition.required_permission, context.tenant_id):
            return False

        if not condition.resource_type:
            return True

        resource_id = None
        if condition.id_field:
            resource_id = get_value(entity, condition.id_field)
        if is_blank(resource_id):
            resource_id = entity.get("id") or context.entity_id
        if is_blank(resource_id):
            return True

        if self.store is None:
            raise RuleConfigurationError(
                "PERMISSION_CONSTRAINT rule with a resource type needs a tenant-scoped store",
                rule_id=rule.id,
            )
        if not context.tenant_id:
            raise MissingTenantError(f"{condition.resource_type} {resource_id} cannot be resolved without a tenant")

        async def lookup(queries: TenantQueries) -> bool:
            return await queries.exists(condition.resource_type, resource_id)

        return bool(await self.store.with_tenant_rls(context.tenant_id, lookup))

    async def _evaluate_custom(self, rule: BusinessRule, entity: Mapping[str, Any], context: ValidationContext) -> bool:
        predicate = self.registry.get(rule.condition)
        try:
            outcome = predicate(entity, context)
            if inspect.isawaitable(outcome):
                outcome = await outcome
            return bool(outcome)
        except Exception:
            logger.warning(
                f"[{context.correlation_id}] Custom rule '{rule.condition}' ({rule.id}) failed; treating as not satisfied",
                exc_info=True,
            )
            return False

    # Issues

    def issue_for(self, rule: BusinessRule, entity: Mapping[str, Any]) -> ValidationIssue:
        """Build the issue reported when a rule is not satisfied."""
        value = get_value(entity, rule.field) if rule.field else None
        return ValidationIssue(
            field=rule.field,
            code=rule.issue_code,
            message=rule.error_message or self._default_message(rule),
            severity=rule.severity,
            value=value,
        )

    @staticmethod
    def _default_message(rule: BusinessRule) -> str:
        if rule.type == RuleType.REQUIRED_FIELD:
            return f"{rule.field} is required"
        if rule.type == RuleType.UNIQUE_CONSTRAINT:
            return f"{rule.field} must be unique"
        if rule.type == RuleType.RANGE_CONSTRAINT:
            return f"{rule.field} must be within {rule.condition.describe()}"
        if rule.type == RuleType.PERMISSION_CONSTRAINT:
            return f"Permission {rule.condition.required_permission} is required"
        return f"{rule.field or 'entity'} failed rule {rule.id}"
