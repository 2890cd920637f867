"""
Settings for the authorization and validation core.

Values are read from the environment (prefix ``AUTHZ_``) or a ``.env`` file
when the host service composes the engine and pipeline.
"""
from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator

from .constants import PermissionAction


class AuthzSettings(BaseSettings):
    """Configuration for catalog loading, evaluation and the tenant store."""

    model_config = SettingsConfigDict(
        env_prefix="AUTHZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Catalog
    catalog_path: Optional[str] = Field(default=None, description="JSON catalog file, packaged catalog when unset")
    catalog_version: Optional[str] = Field(default=None, description="Required catalog version")
    strict_permissions: bool = Field(default=True)

    # Validation pipeline
    integrity_concurrency: int = Field(default=1, ge=1)
    bulk_concurrency: int = Field(default=10, ge=1)
    delete_action: str = Field(default=PermissionAction.SOFT_DELETE.value)
    tenant_isolation: bool = Field(default=True)
    require_version_on_update: bool = Field(default=False)

    # Tenant-scoped store
    rls_tenant_setting: str = Field(default="app.current_tenant_id")
    tenant_column: str = Field(default="tenant_id")
    id_column: str = Field(default="id")

    @field_validator("delete_action")
    @classmethod
    def validate_delete_action(cls, v: str) -> str:
        """Delete permission must use one of the catalog's actions."""
        return PermissionAction(v).value


@lru_cache()
def get_settings() -> AuthzSettings:
    """Get cached settings instance."""
    return AuthzSettings()
