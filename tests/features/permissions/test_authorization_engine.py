"""Tests for the authorization engine and guard evaluation."""

import asyncio
import logging

import pytest

from erp_authz.core.exceptions import (
    ConfigurationError,
    InvalidPermissionCodeError,
    UnknownPermissionError,
    UnknownRoleError,
)
from erp_authz.features.permissions import (
    ActorContext,
    ActorResolver,
    AllOf,
    AnyOf,
    AuthorizationEngine,
    PermissionLeaf,
    PredicateLeaf,
    RbacCheck,
    RoleLeaf,
    all_of,
    any_of,
    guard_from_mapping,
)


ROLE_LISTS = [
    [],
    ["ADMIN"],
    ["VIEWER"],
    ["ADMIN", "VIEWER"],
    ["WORKER", "DRIVER"],
    ["PROJECT_MANAGER", "WORKER", "VIEWER"],
]


class TestResolveActor:
    """Test building actor contexts from role assignments."""

    def test_union_of_permissions(self, engine, catalog):
        actor = engine.resolve_actor("u1", "tenant-a", ["WORKER", "VIEWER"])
        assert actor.roles == frozenset({"WORKER", "VIEWER"})
        assert actor.permissions == catalog.permissions_for("WORKER") | catalog.permissions_for("VIEWER")

    def test_conflicting_roles_get_union(self, engine, catalog, caplog):
        with caplog.at_level(logging.WARNING):
            actor = engine.resolve_actor("u1", "tenant-a", ["ADMIN", "VIEWER"])
        assert actor.permissions == catalog.permissions_for("ADMIN") | catalog.permissions_for("VIEWER")
        assert "conflicting roles" in caplog.text

    def test_unknown_role(self, engine):
        with pytest.raises(UnknownRoleError):
            engine.resolve_actor("u1", "tenant-a", ["SUPERUSER"])


class TestRoleQueries:
    """Test role membership semantics."""

    @pytest.mark.parametrize("actor_roles", ROLE_LISTS)
    @pytest.mark.parametrize("query", ROLE_LISTS)
    def test_any_and_all_semantics(self, engine, make_actor, actor_roles, query):
        actor = make_actor(roles=actor_roles)
        assert engine.has_all_roles(actor, query) == all(r in actor_roles for r in query)
        assert engine.has_role(actor, query) == any(r in actor_roles for r in query)
        assert engine.has_any_role(actor, query) == any(r in actor_roles for r in query)

    def test_single_role(self, engine, admin_actor):
        assert engine.has_role(admin_actor, "ADMIN")
        assert not engine.has_role(admin_actor, "VIEWER")

    def test_empty_queries(self, engine, admin_actor):
        assert engine.has_role(admin_actor, []) is False
        assert engine.has_all_roles(admin_actor, []) is True


class TestPermissionQueries:
    """Test permission membership semantics."""

    def test_admin_can_create_project(self, engine, admin_actor):
        assert engine.has_permission(admin_actor, "Project.create")

    def test_viewer_cannot_create_project(self, engine, viewer_actor):
        assert not engine.has_permission(viewer_actor, "Project.create")

    def test_any_and_all(self, engine, worker_actor):
        assert engine.has_any_permission(worker_actor, ["Project.create", "Project.read"])
        assert not engine.has_all_permissions(worker_actor, ["Project.create", "Project.read"])
        assert engine.has_all_permissions(worker_actor, ["Project.read", "Timesheet.create"])

    def test_empty_queries(self, engine, admin_actor):
        assert engine.has_any_permission(admin_actor, []) is False
        assert engine.has_all_permissions(admin_actor, []) is True

    def test_strict_mode_rejects_unknown_permission(self, engine, admin_actor):
        with pytest.raises(UnknownPermissionError):
            engine.has_permission(admin_actor, "Spaceship.read")

    def test_strict_mode_rejects_malformed_permission(self, engine, admin_actor):
        with pytest.raises(InvalidPermissionCodeError):
            engine.has_permission(admin_actor, "project:create")

    def test_lenient_mode(self, catalog, make_actor):
        engine = AuthorizationEngine(catalog, strict_permissions=False)
        actor = make_actor(permissions=["Spaceship.read"])
        assert engine.has_permission(actor, "Spaceship.read")

    def test_authorize_reports_missing(self, engine, worker_actor):
        decision = engine.authorize(worker_actor, ["Project.read", "Project.create"])
        assert not decision
        assert decision.missing_permissions == ["Project.create"]
        assert "Project.create" in decision.reason

    def test_authorize_any(self, engine, worker_actor):
        decision = engine.authorize(worker_actor, ["Project.read", "Project.create"], require_all=False)
        assert decision.granted

    def test_resource_helpers(self, engine, manager_actor, viewer_actor, admin_actor):
        assert engine.can_read(viewer_actor, "Invoice")
        assert not engine.can_write(viewer_actor, "Invoice")
        assert engine.can_write(manager_actor, "Project")
        assert engine.can_delete(manager_actor, "Project")
        assert engine.can_delete(admin_actor, "Project")
        assert not engine.can_read(viewer_actor, "Nonexistent")


class TestTenantScoping:
    """Cross-tenant checks answer 'no access' without raising."""

    def test_mismatch_denies(self, engine, foreign_admin_actor, caplog):
        with caplog.at_level(logging.WARNING):
            assert not engine.has_permission(foreign_admin_actor, "Project.create", resource_tenant_id="tenant-a")
        assert "Cross-tenant access denied" in caplog.text

    def test_matching_tenant(self, engine, admin_actor):
        assert engine.has_permission(admin_actor, "Project.create", resource_tenant_id="tenant-a")

    def test_all_queries_denied(self, engine, foreign_admin_actor):
        assert not engine.has_role(foreign_admin_actor, "ADMIN", resource_tenant_id="tenant-a")
        assert not engine.has_all_roles(foreign_admin_actor, [], resource_tenant_id="tenant-a")
        assert not engine.has_all_permissions(foreign_admin_actor, [], resource_tenant_id="tenant-a")
        assert not engine.evaluate_guard(foreign_admin_actor, AllOf(), resource_tenant_id="tenant-a")

    def test_actor_without_tenant(self, engine, make_actor):
        actor = make_actor(roles=["ADMIN"], permissions=["Project.create"], tenant_id=None)
        assert not engine.has_permission(actor, "Project.create", resource_tenant_id="tenant-a")

    def test_validate_context(self, engine, worker_actor):
        assert engine.validate_context(worker_actor, tenant_id="tenant-b").reason == "Tenant access denied"
        assert not engine.validate_context(worker_actor, required_roles=["ADMIN"]).granted
        assert not engine.validate_context(worker_actor, required_permissions=["Project.create"]).granted
        assert engine.validate_context(
            worker_actor, required_roles=["WORKER"], required_permissions=["Project.read"], tenant_id="tenant-a"
        ).granted


class TestGuards:
    """Test guard tree evaluation."""

    def test_viewer_denied_by_permission_guard(self, engine, viewer_actor):
        guard = guard_from_mapping({"permissions": ["Project.create"], "operator": "OR"})
        assert not engine.evaluate_guard(viewer_actor, guard)

    def test_admin_allowed_by_permission_guard(self, engine, admin_actor):
        guard = guard_from_mapping({"permissions": ["Project.create"], "operator": "OR"})
        assert engine.evaluate_guard(admin_actor, guard)

    def test_empty_guard_grants(self, engine, viewer_actor):
        assert engine.evaluate_guard(viewer_actor, guard_from_mapping({}))
        assert engine.evaluate_guard(viewer_actor, guard_from_mapping({"operator": "AND"}))
        assert engine.evaluate_guard(viewer_actor, AnyOf())

    def test_and_operator(self, engine, manager_actor):
        guard = guard_from_mapping({"roles": ["PROJECT_MANAGER"], "permissions": ["Project.hard_delete"], "operator": "and"})
        assert isinstance(guard, AllOf)
        assert not engine.evaluate_guard(manager_actor, guard)

    def test_nested_tree(self, engine, worker_actor, manager_actor):
        guard = any_of(
            RoleLeaf("ADMIN"),
            all_of(RoleLeaf("WORKER"), PermissionLeaf("Timesheet.create")),
        )
        assert engine.evaluate_guard(worker_actor, guard)
        assert not engine.evaluate_guard(manager_actor, guard)

    def test_predicate_receives_actor(self, engine, worker_actor):
        seen = []

        def is_worker(actor: ActorContext) -> bool:
            seen.append(actor)
            return actor.actor_id == "user-worker"

        assert engine.evaluate_guard(worker_actor, guard_from_mapping({}, predicates=[is_worker]))
        assert seen == [worker_actor]

    def test_raising_predicate_is_not_satisfied(self, engine, admin_actor, caplog):
        def broken(actor):
            raise RuntimeError("boom")

        guard = any_of(PredicateLeaf(broken, name="broken"))
        with caplog.at_level(logging.WARNING):
            assert not engine.evaluate_guard(admin_actor, guard)
        assert "broken" in caplog.text

    def test_raising_predicate_inside_or(self, engine, admin_actor):
        def broken(actor):
            raise ValueError("boom")

        guard = any_of(PredicateLeaf(broken), RoleLeaf("ADMIN"))
        assert engine.evaluate_guard(admin_actor, guard)

    def test_async_predicate_requires_async_evaluation(self, engine, admin_actor):
        async def allowed(actor):
            return True

        guard = all_of(PredicateLeaf(allowed))
        assert not engine.evaluate_guard(admin_actor, guard)
        assert asyncio.run(engine.evaluate_guard_async(admin_actor, guard))

    @pytest.mark.asyncio
    async def test_async_predicate_rejection(self, engine, admin_actor):
        async def rejected(actor):
            raise PermissionError("nope")

        guard = any_of(RoleLeaf("VIEWER"), PredicateLeaf(rejected))
        assert await engine.evaluate_guard_async(admin_actor, guard) is False

    @pytest.mark.asyncio
    async def test_async_evaluation_of_plain_leaves(self, engine, viewer_actor):
        guard = all_of(RoleLeaf("VIEWER"), PermissionLeaf("Project.read"))
        assert await engine.evaluate_guard_async(viewer_actor, guard)
        assert await engine.evaluate_guard_async(viewer_actor, AllOf())

    def test_unknown_operator(self):
        with pytest.raises(ConfigurationError):
            guard_from_mapping({"operator": "XOR"})

    def test_predicate_must_be_callable(self):
        with pytest.raises(ConfigurationError):
            PredicateLeaf("not callable")


class TestRbacCheckContract:
    """Test the actor-bound RbacCheck implementation."""

    def test_satisfies_protocol(self, engine, admin_actor):
        assert isinstance(engine.for_actor(admin_actor), RbacCheck)

    def test_bound_checks(self, engine, manager_actor):
        rbac = engine.for_actor(manager_actor)
        assert rbac.has_role(["ADMIN", "PROJECT_MANAGER"])
        assert not rbac.has_all_roles(["ADMIN", "PROJECT_MANAGER"])
        assert rbac.has_any_role(["PROJECT_MANAGER"])
        assert rbac.has_permission("Project.create")
        assert rbac.has_any_permission(["Project.hard_delete", "Project.update"])
        assert not rbac.has_all_permissions(["Project.hard_delete", "Project.update"])
        assert rbac.evaluate_guard(RoleLeaf("PROJECT_MANAGER"))

    def test_bound_to_resource_tenant(self, engine, manager_actor):
        rbac = engine.for_actor(manager_actor, resource_tenant_id="tenant-b")
        assert not rbac.has_permission("Project.read")


class AssignmentResolver:
    """Resolves actors from an in-memory role assignment table."""

    def __init__(self, engine, assignments):
        self.engine = engine
        self.assignments = assignments

    async def resolve(self, actor_id, tenant_id):
        return self.engine.resolve_actor(actor_id, tenant_id, self.assignments.get((tenant_id, actor_id), []))


class TestActorResolverContract:
    """Resolvers built on resolve_actor satisfy the protocol."""

    @pytest.mark.asyncio
    async def test_resolves_per_tenant(self, engine):
        resolver = AssignmentResolver(engine, {("tenant-a", "u1"): ["WORKER"], ("tenant-b", "u1"): ["ADMIN"]})
        assert isinstance(resolver, ActorResolver)

        in_a = await resolver.resolve("u1", "tenant-a")
        in_b = await resolver.resolve("u1", "tenant-b")

        assert not engine.has_permission(in_a, "Project.create")
        assert engine.has_permission(in_b, "Project.create")
        assert (await resolver.resolve("u2", "tenant-a")).permissions == frozenset()
