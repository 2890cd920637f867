"""Tenant-scoped store contracts consumed by the validation pipeline.

Every integrity and permission-constraint lookup runs inside
``with_tenant_rls`` so that queries only observe the active tenant's rows.
"""

from abc import abstractmethod
from typing import Any, Awaitable, Callable, Optional, Protocol, TypeVar, runtime_checkable


R = TypeVar("R")


@runtime_checkable
class TenantQueries(Protocol):
    """Queries available inside a tenant-scoped unit of work."""

    @abstractmethod
    async def find_conflict(
        self,
        table: str,
        field: str,
        value: Any,
        exclude_id: Optional[Any] = None,
    ) -> Optional[Any]:
        """Return the id of a record with ``field == value``, if any.

        Args:
            table: Table holding the entity
            field: Column compared for equality
            value: Candidate value
            exclude_id: Id of the entity being updated

        Returns:
            Id of the conflicting record or None
        """
        ...

    @abstractmethod
    async def exists(self, table: str, record_id: Any) -> bool:
        """Check a record with the given id is visible in the tenant."""
        ...


@runtime_checkable
class TenantScopedStore(Protocol):
    """Executor running a callback with tenant row-level security applied."""

    @abstractmethod
    async def with_tenant_rls(
        self,
        tenant_id: str,
        fn: Callable[[TenantQueries], Awaitable[R]],
    ) -> R:
        """Run ``fn`` with queries restricted to ``tenant_id``.

        Raises:
            MissingTenantError: When tenant_id is empty
            StoreError: When the underlying store fails
        """
        ...
