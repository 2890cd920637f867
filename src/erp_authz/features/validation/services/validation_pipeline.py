"""Staged validation pipeline.

Stages run strictly in order for one call:

1. syntactic  - schema shape and types; a failure returns immediately
2. semantic   - business rules, cross-field checks, version requirement
3. security   - tenant isolation, operation permission, permission rules
4. integrity  - uniqueness and reference checks against the tenant store

Issues from stages 2-4 are aggregated without deduplication. The result
succeeds only when no ERROR-severity issue was produced.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import (
    Any, Awaitable, Callable, Coroutine, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar, Union,
)

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ....config.constants import IssueCode, OperationType, PermissionAction, RuleType
from ....config.settings import AuthzSettings
from ....core.exceptions import ConfigurationError, MissingTenantError
from ....core.value_objects import PermissionCode
from ...permissions.entities import ActorContext
from ...permissions.services import AuthorizationEngine
from ..entities import (
    BusinessRule,
    TenantQueries,
    ValidationContext,
    ValidationIssue,
    ValidationResult,
)
from .business_rule_engine import BusinessRuleEngine
from .cross_field import CrossFieldCheck
from .values import is_blank


logger = logging.getLogger(__name__)

SEMANTIC_RULE_TYPES = (RuleType.REQUIRED_FIELD, RuleType.RANGE_CONSTRAINT, RuleType.CUSTOM_RULE)
SECURITY_RULE_TYPES = (RuleType.PERMISSION_CONSTRAINT,)
INTEGRITY_RULE_TYPES = (RuleType.UNIQUE_CONSTRAINT,)

OPERATION_ACTIONS: Dict[OperationType, PermissionAction] = {
    OperationType.CREATE: PermissionAction.CREATE,
    OperationType.UPDATE: PermissionAction.UPDATE,
    OperationType.DELETE: PermissionAction.SOFT_DELETE,
}

R = TypeVar("R")


async def run_all(coroutines: Iterable[Coroutine[Any, Any, R]]) -> List[R]:
    """Run coroutines concurrently and return their results in order.

    The first failure cancels the remaining coroutines and is re-raised
    once they have all finished.
    """
    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(coroutine) for coroutine in coroutines]
    except ExceptionGroup as e:
        raise e.exceptions[0] from e
    return [task.result() for task in tasks]


@dataclass(frozen=True)
class ReferenceCheck:
    """Referenced id(s) in ``field`` must exist in ``table`` within the tenant."""

    field: str
    table: str
    error_code: str = IssueCode.REFERENCE_NOT_FOUND.value
    message: Optional[str] = None


class ValidationPipeline:
    """Runs the four validation stages for one entity type."""

    def __init__(
        self,
        rule_engine: BusinessRuleEngine,
        authorization: Optional[AuthorizationEngine] = None,
        schema: Optional[Type[BaseModel]] = None,
        rules: Iterable[BusinessRule] = (),
        cross_field_checks: Iterable[CrossFieldCheck] = (),
        references: Iterable[ReferenceCheck] = (),
        operation_permissions: Optional[Mapping[Union[str, OperationType], str]] = None,
        integrity_concurrency: int = 1,
        tenant_isolation: bool = True,
        require_version_on_update: bool = False,
        delete_action: Union[str, PermissionAction] = PermissionAction.SOFT_DELETE,
        bulk_concurrency: int = 10,
    ):
        if integrity_concurrency < 1 or bulk_concurrency < 1:
            raise ValueError("Concurrency limits must be at least 1")

        self.rule_engine = rule_engine
        self.authorization = authorization if authorization is not None else rule_engine.authorization
        self.schema = schema
        self.rules: Tuple[BusinessRule, ...] = tuple(rules)
        self.cross_field_checks = tuple(cross_field_checks)
        self.references = tuple(references)
        if self.references and rule_engine.store is None:
            raise ConfigurationError("Reference checks need a tenant-scoped store")
        self.operation_permissions = {
            OperationType(op): permission for op, permission in (operation_permissions or {}).items()
        }
        self.integrity_concurrency = integrity_concurrency
        self.bulk_concurrency = bulk_concurrency
        self.tenant_isolation = tenant_isolation
        self.require_version_on_update = require_version_on_update
        self.operation_actions = dict(OPERATION_ACTIONS)
        self.operation_actions[OperationType.DELETE] = PermissionAction(delete_action)

    @classmethod
    def from_settings(cls, rule_engine: BusinessRuleEngine, settings: AuthzSettings, **kwargs) -> "ValidationPipeline":
        """Create a pipeline using the configured concurrency and security options."""
        kwargs.setdefault("integrity_concurrency", settings.integrity_concurrency)
        kwargs.setdefault("tenant_isolation", settings.tenant_isolation)
        kwargs.setdefault("require_version_on_update", settings.require_version_on_update)
        kwargs.setdefault("delete_action", settings.delete_action)
        kwargs.setdefault("bulk_concurrency", settings.bulk_concurrency)
        return cls(rule_engine, **kwargs)

    def operation_permission(self, entity: str, operation: OperationType) -> str:
        """Permission required to perform ``operation`` on ``entity``."""
        if operation in self.operation_permissions:
            return self.operation_permissions[operation]
        return PermissionCode.of(entity, self.operation_actions[operation]).value

    # Entry points

    async def validate(
        self,
        payload: Any,
        context: ValidationContext,
        actor: Optional[ActorContext] = None,
        operation: Optional[Union[str, OperationType]] = None,
    ) -> ValidationResult:
        """Validate one payload.

        Raises:
            RuleConfigurationError: When a configured rule is invalid
            StoreError: When the tenant store fails
        """
        self.rule_engine.ensure_configured(self.rules)
        op = OperationType(operation) if operation else None
        cid = context.correlation_id

        data, entity, schema_issues = self._syntactic(payload)
        if schema_issues:
            logger.info(f"[{cid}] {context.entity} payload rejected by schema with {len(schema_issues)} issues")
            return ValidationResult.fail(schema_issues)

        rules = self.rule_engine.applicable_rules(self.rules, context)

        semantic = await self._semantic(entity, context, rules, op, actor)
        logger.debug(f"[{cid}] semantic stage produced {len(semantic)} issues")

        security = await self._security(entity, context, rules, op, actor)
        logger.debug(f"[{cid}] security stage produced {len(security)} issues")

        integrity = await self._integrity(entity, context, rules)
        logger.debug(f"[{cid}] integrity stage produced {len(integrity)} issues")

        result = ValidationResult.from_issues(data, semantic + security + integrity)
        if not result.success:
            logger.info(
                f"[{cid}] Validation of {context.entity} failed: "
                f"{', '.join(issue.code for issue in result.errors)}"
            )
        return result

    async def validate_bulk(
        self,
        payloads: Sequence[Any],
        context: ValidationContext,
        actor: Optional[ActorContext] = None,
        operation: Optional[Union[str, OperationType]] = None,
        concurrency: Optional[int] = None,
    ) -> List[ValidationResult]:
        """Validate several payloads concurrently; results keep input order."""
        semaphore = asyncio.Semaphore(max(1, concurrency or self.bulk_concurrency))

        async def run(index: int, payload: Any) -> ValidationResult:
            item_id = payload.get("id") if isinstance(payload, Mapping) else None
            async with semaphore:
                return await self.validate(payload, context.child(index, item_id), actor, operation)

        return await run_all(run(i, p) for i, p in enumerate(payloads))

    # Stage 1

    def _syntactic(self, payload: Any) -> Tuple[Any, Dict[str, Any], List[ValidationIssue]]:
        if self.schema is None:
            if not isinstance(payload, Mapping):
                issue = ValidationIssue.error("", IssueCode.SCHEMA_INVALID, "Payload must be an object")
                return None, {}, [issue]
            entity = dict(payload)
            return entity, entity, []

        if isinstance(payload, self.schema):
            model = payload
        else:
            try:
                model = self.schema.model_validate(payload)
            except PydanticValidationError as e:
                return None, {}, [self._schema_issue(error) for error in e.errors()]
        return model, model.model_dump(), []

    @staticmethod
    def _schema_issue(error: Mapping[str, Any]) -> ValidationIssue:
        location = ".".join(str(part) for part in error.get("loc", ()))
        value = None if error.get("type") == "missing" else error.get("input")
        return ValidationIssue.error(location, IssueCode.SCHEMA_INVALID, error.get("msg", "Invalid value"), value)

    # Stage 2

    async def _semantic(
        self,
        entity: Mapping[str, Any],
        context: ValidationContext,
        rules: List[BusinessRule],
        operation: Optional[OperationType],
        actor: Optional[ActorContext],
    ) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []

        for rule in rules:
            if rule.type not in SEMANTIC_RULE_TYPES:
                continue
            if not await self.rule_engine.evaluate(rule, entity, context, actor):
                issues.append(self.rule_engine.issue_for(rule, entity))

        for check in self.cross_field_checks:
            issue = check.check(entity)
            if issue is not None:
                issues.append(issue)

        if (
            self.require_version_on_update
            and operation == OperationType.UPDATE
            and is_blank(entity.get("version"))
        ):
            issues.append(ValidationIssue.error(
                "version", IssueCode.MISSING_VERSION, "Version is required for updates"
            ))

        return issues

    # Stage 3

    async def _security(
        self,
        entity: Mapping[str, Any],
        context: ValidationContext,
        rules: List[BusinessRule],
        operation: Optional[OperationType],
        actor: Optional[ActorContext],
    ) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []

        entity_tenant = entity.get("tenant_id")
        if (
            self.tenant_isolation
            and not is_blank(entity_tenant)
            and context.tenant_id is not None
            and str(entity_tenant) != str(context.tenant_id)
        ):
            issues.append(ValidationIssue.error(
                "tenant_id", IssueCode.TENANT_MISMATCH, "Entity does not belong to the current tenant", entity_tenant
            ))

        if operation is not None:
            permission = self.operation_permission(context.entity, operation)
            if actor is None:
                granted = False
            else:
                granted = self.authorization.authorize(actor, permission, resource_tenant_id=context.tenant_id).granted
            if not granted:
                issues.append(ValidationIssue.error(
                    "", IssueCode.PERMISSION_DENIED,
                    f"Permission {permission} is required to {operation.value.lower()} {context.entity}",
                ))

        for rule in rules:
            if rule.type not in SECURITY_RULE_TYPES:
                continue
            try:
                satisfied = await self.rule_engine.evaluate(rule, entity, context, actor)
            except MissingTenantError as e:
                issues.append(self._missing_tenant(rule.field, e))
                continue
            if not satisfied:
                issues.append(self.rule_engine.issue_for(rule, entity))

        return issues

    # Stage 4

    async def _integrity(
        self,
        entity: Mapping[str, Any],
        context: ValidationContext,
        rules: List[BusinessRule],
    ) -> List[ValidationIssue]:
        checks: List[Callable[[], Awaitable[List[ValidationIssue]]]] = []

        for rule in rules:
            if rule.type in INTEGRITY_RULE_TYPES:
                checks.append(self._unique_check(rule, entity, context))
        for reference in self.references:
            checks.append(self._reference_check(reference, entity, context))

        if not checks:
            return []

        if self.integrity_concurrency == 1:
            results = [await check() for check in checks]
        else:
            semaphore = asyncio.Semaphore(self.integrity_concurrency)

            async def bounded(check):
                async with semaphore:
                    return await check()

            results = await run_all(bounded(check) for check in checks)

        return [issue for group in results for issue in group]

    def _unique_check(self, rule: BusinessRule, entity: Mapping[str, Any], context: ValidationContext):
        async def run() -> List[ValidationIssue]:
            try:
                satisfied = await self.rule_engine.evaluate(rule, entity, context)
            except MissingTenantError as e:
                return [self._missing_tenant(rule.field, e)]
            return [] if satisfied else [self.rule_engine.issue_for(rule, entity)]
        return run

    def _reference_check(self, reference: ReferenceCheck, entity: Mapping[str, Any], context: ValidationContext):
        async def run() -> List[ValidationIssue]:
            value = entity.get(reference.field)
            if is_blank(value):
                return []
            ids = list(value) if isinstance(value, (list, tuple, set, frozenset)) else [value]
            store = self.rule_engine.store
            if not context.tenant_id:
                error = MissingTenantError(f"{reference.field} cannot be resolved without a tenant")
                return [self._missing_tenant(reference.field, error)]

            async def lookup(queries: TenantQueries) -> List[Any]:
                missing = []
                for record_id in ids:
                    if not await queries.exists(reference.table, record_id):
                        missing.append(record_id)
                return missing

            missing = await store.with_tenant_rls(context.tenant_id, lookup)
            return [
                ValidationIssue.error(
                    reference.field,
                    reference.error_code,
                    reference.message or f"Referenced {reference.table} {record_id} does not exist",
                    record_id,
                )
                for record_id in missing
            ]
        return run

    @staticmethod
    def _missing_tenant(field_path: str, error: Exception) -> ValidationIssue:
        return ValidationIssue.error(field_path, IssueCode.MISSING_TENANT_ID, str(error))
