"""Pytest configuration and fixtures for erp-authz-core tests."""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from erp_authz.core.exceptions import MissingTenantError
from erp_authz.features.permissions import (
    ActorContext,
    AuthorizationEngine,
    RoleHierarchy,
    load_catalog,
)
from erp_authz.features.validation import (
    BusinessRuleEngine,
    CustomRuleRegistry,
    ValidationContext,
)


TENANT_A = "tenant-a"
TENANT_B = "tenant-b"


class InMemoryTenantQueries:
    """Tenant-restricted view over the in-memory records."""

    def __init__(self, store: "InMemoryTenantStore", tenant_id: str):
        self.store = store
        self.tenant_id = tenant_id

    def _rows(self, table: str) -> List[Dict[str, Any]]:
        return self.store.records.get(self.tenant_id, {}).get(table, [])

    async def find_conflict(self, table: str, field: str, value: Any, exclude_id: Optional[Any] = None):
        self.store.calls.append(("find_conflict", self.tenant_id, table, field, value, exclude_id))
        for row in self._rows(table):
            if row.get(field) == value and (exclude_id is None or str(row.get("id")) != str(exclude_id)):
                return row.get("id")
        return None

    async def exists(self, table: str, record_id: Any) -> bool:
        self.store.calls.append(("exists", self.tenant_id, table, record_id))
        return any(str(row.get("id")) == str(record_id) for row in self._rows(table))


class InMemoryTenantStore:
    """Tenant-scoped store fake keyed by tenant and table."""

    def __init__(self):
        self.records: Dict[str, Dict[str, List[Dict[str, Any]]]] = {}
        self.calls: List[Tuple] = []
        self.scopes: List[str] = []

    def add(self, tenant_id: str, table: str, **row) -> None:
        self.records.setdefault(tenant_id, {}).setdefault(table, []).append(row)

    async def with_tenant_rls(self, tenant_id: str, fn):
        if not tenant_id:
            raise MissingTenantError("Tenant id is required for tenant-scoped queries")
        self.scopes.append(tenant_id)
        return await fn(InMemoryTenantQueries(self, tenant_id))


@pytest.fixture(scope="session")
def catalog():
    """Packaged permission catalog."""
    return load_catalog()


@pytest.fixture
def hierarchy(catalog):
    return RoleHierarchy(catalog)


@pytest.fixture
def engine(catalog, hierarchy):
    return AuthorizationEngine(catalog, hierarchy)


@pytest.fixture
def admin_actor(engine):
    return engine.resolve_actor("user-admin", TENANT_A, ["ADMIN"])


@pytest.fixture
def manager_actor(engine):
    return engine.resolve_actor("user-pm", TENANT_A, ["PROJECT_MANAGER"])


@pytest.fixture
def worker_actor(engine):
    return engine.resolve_actor("user-worker", TENANT_A, ["WORKER"])


@pytest.fixture
def viewer_actor(engine):
    return engine.resolve_actor("user-viewer", TENANT_A, ["VIEWER"])


@pytest.fixture
def foreign_admin_actor(engine):
    """Administrator of another tenant."""
    return engine.resolve_actor("user-foreign", TENANT_B, ["ADMIN"])


@pytest.fixture
def store():
    return InMemoryTenantStore()


@pytest.fixture
def registry():
    return CustomRuleRegistry()


@pytest.fixture
def rule_engine(engine, store, registry):
    return BusinessRuleEngine(engine, store=store, registry=registry)


@pytest.fixture
def user_context():
    return ValidationContext(entity="User", tenant_id=TENANT_A, actor_id="user-admin", correlation_id="cid-1")


@pytest.fixture
def make_actor():
    """Build an actor context without going through the catalog."""
    def _make(roles=(), permissions=(), tenant_id: Optional[str] = TENANT_A, actor_id: str = "user-x"):
        return ActorContext(actor_id=actor_id, tenant_id=tenant_id, roles=frozenset(roles), permissions=frozenset(permissions))
    return _make
