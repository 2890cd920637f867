"""Tenant-scoped store implementation using AsyncPG.

Each unit of work runs in a transaction on a pooled connection with the
tenant id published through ``set_config`` so that PostgreSQL row-level
security policies restrict every query to that tenant. Queries also filter
on the tenant column explicitly.
"""

import logging
import re
from typing import Any, Awaitable, Callable, Mapping, Optional, TypeVar

import asyncpg

from ....config.settings import AuthzSettings
from ....core.exceptions import MissingTenantError, StoreError
from ..entities.protocols import TenantQueries, TenantScopedStore


logger = logging.getLogger(__name__)

R = TypeVar("R")

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def quote_identifier(name: str) -> str:
    """Validate and quote a table or column name, allowing one schema prefix."""
    parts = name.split(".")
    if not name or len(parts) > 2 or not all(IDENTIFIER_PATTERN.match(p) for p in parts):
        raise StoreError(f"Invalid identifier: {name!r}")
    return ".".join(f'"{p}"' for p in parts)


class AsyncPGTenantQueries(TenantQueries):
    """Queries bound to one connection inside a tenant-scoped transaction."""

    def __init__(
        self,
        connection,
        tenant_id: str,
        tenant_column: str = "tenant_id",
        id_column: str = "id",
        table_names: Optional[Mapping[str, str]] = None,
    ):
        self.connection = connection
        self.tenant_id = tenant_id
        self.tenant_column = quote_identifier(tenant_column)
        self.id_column = quote_identifier(id_column)
        self.table_names = dict(table_names or {})

    def _table(self, table: str) -> str:
        return quote_identifier(self.table_names.get(table, table))

    async def find_conflict(
        self,
        table: str,
        field: str,
        value: Any,
        exclude_id: Optional[Any] = None,
    ) -> Optional[Any]:
        """Find a record in the tenant sharing ``field == value``."""
        query = (
            f"SELECT {self.id_column} FROM {self._table(table)} "
            f"WHERE {quote_identifier(field)} = $1 AND {self.tenant_column} = $2"
        )
        params = [value, self.tenant_id]
        if exclude_id is not None:
            query += f" AND {self.id_column}::text <> $3::text"
            params.append(str(exclude_id))
        query += " LIMIT 1"

        try:
            return await self.connection.fetchval(query, *params)
        except asyncpg.PostgresError as e:
            logger.error(f"Uniqueness lookup on {table}.{field} failed for tenant {self.tenant_id}: {e}")
            raise StoreError(f"Uniqueness lookup on {table}.{field} failed", details={"table": table}) from e

    async def exists(self, table: str, record_id: Any) -> bool:
        """Check a record id is visible in the tenant."""
        query = (
            f"SELECT EXISTS(SELECT 1 FROM {self._table(table)} "
            f"WHERE {self.id_column}::text = $1::text AND {self.tenant_column} = $2)"
        )
        try:
            return bool(await self.connection.fetchval(query, str(record_id), self.tenant_id))
        except asyncpg.PostgresError as e:
            logger.error(f"Existence lookup on {table} failed for tenant {self.tenant_id}: {e}")
            raise StoreError(f"Existence lookup on {table} failed", details={"table": table}) from e


class AsyncPGTenantStore(TenantScopedStore):
    """Runs callbacks on an asyncpg pool with tenant row-level security."""

    def __init__(
        self,
        pool: asyncpg.Pool,
        rls_setting: str = "app.current_tenant_id",
        tenant_column: str = "tenant_id",
        id_column: str = "id",
        table_names: Optional[Mapping[str, str]] = None,
    ):
        self.pool = pool
        self.rls_setting = rls_setting
        self.tenant_column = tenant_column
        self.id_column = id_column
        self.table_names = dict(table_names or {})

    @classmethod
    def from_settings(
        cls,
        pool: asyncpg.Pool,
        settings: AuthzSettings,
        table_names: Optional[Mapping[str, str]] = None,
    ) -> "AsyncPGTenantStore":
        return cls(
            pool,
            rls_setting=settings.rls_tenant_setting,
            tenant_column=settings.tenant_column,
            id_column=settings.id_column,
            table_names=table_names,
        )

    async def with_tenant_rls(
        self,
        tenant_id: str,
        fn: Callable[[TenantQueries], Awaitable[R]],
    ) -> R:
        """Run ``fn`` inside a transaction scoped to ``tenant_id``."""
        if not tenant_id:
            raise MissingTenantError("Tenant id is required for tenant-scoped queries")

        tenant = str(tenant_id)
        async with self.pool.acquire() as connection:
            async with connection.transaction():
                try:
                    # is_local=true keeps the setting inside this transaction
                    await connection.execute("SELECT set_config($1, $2, true)", self.rls_setting, tenant)
                except asyncpg.PostgresError as e:
                    logger.error(f"Failed to apply tenant scope for {tenant}: {e}")
                    raise StoreError(f"Failed to apply tenant scope for {tenant}") from e

                queries = AsyncPGTenantQueries(
                    connection,
                    tenant,
                    tenant_column=self.tenant_column,
                    id_column=self.id_column,
                    table_names=self.table_names,
                )
                return await fn(queries)
