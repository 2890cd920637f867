"""Tenant-scoped store implementations."""

from .asyncpg_store import AsyncPGTenantQueries, AsyncPGTenantStore, quote_identifier

__all__ = ["AsyncPGTenantQueries", "AsyncPGTenantStore", "quote_identifier"]
