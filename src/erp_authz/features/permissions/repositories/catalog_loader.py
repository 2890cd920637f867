"""Loader for the versioned role/permission catalog.

The catalog is generated from the declarative RBAC schema and shipped as a
JSON document. It is read once at startup; any failure is a deployment
defect and raises CatalogLoadError.
"""

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from ....config.constants import CatalogDefaults
from ....config.settings import AuthzSettings
from ....core.exceptions import CatalogLoadError
from ..entities import PermissionCatalog, RoleDefinition


logger = logging.getLogger(__name__)


def catalog_from_document(document: Mapping[str, Any]) -> PermissionCatalog:
    """Build a catalog from a parsed catalog document.

    Args:
        document: Mapping with ``version``, ``roles`` and ``role_permissions``

    Returns:
        Validated immutable catalog
    """
    if not isinstance(document, Mapping):
        raise CatalogLoadError("Catalog document must be a JSON object")

    missing = [key for key in ("version", "roles", "role_permissions") if key not in document]
    if missing:
        raise CatalogLoadError(f"Catalog document is missing keys: {missing}")

    roles_data = document["roles"]
    permissions_data = document["role_permissions"]
    if not isinstance(roles_data, Mapping) or not isinstance(permissions_data, Mapping):
        raise CatalogLoadError("Catalog 'roles' and 'role_permissions' must be objects")

    roles = {}
    for code, record in roles_data.items():
        if not isinstance(record, Mapping):
            raise CatalogLoadError(f"Role {code} must be an object")
        roles[code] = RoleDefinition.from_record(code, record)

    return PermissionCatalog(
        version=document["version"],
        roles=roles,
        role_permissions=permissions_data,
    )


def load_catalog(
    path: Optional[Union[str, Path]] = None,
    expected_version: Optional[str] = None,
) -> PermissionCatalog:
    """Load the catalog from a JSON file or the packaged default.

    Args:
        path: Catalog file, the packaged catalog when None
        expected_version: Version the deployment requires, if any

    Returns:
        Loaded catalog

    Raises:
        CatalogLoadError: When the file cannot be read, parsed or validated
    """
    source = str(path) if path else f"{CatalogDefaults.PACKAGE}/{CatalogDefaults.DATA_DIR}/{CatalogDefaults.FILE_NAME}"
    try:
        if path:
            raw = Path(path).read_text(encoding="utf-8")
        else:
            raw = (
                resources.files(CatalogDefaults.PACKAGE)
                .joinpath(CatalogDefaults.DATA_DIR)
                .joinpath(CatalogDefaults.FILE_NAME)
                .read_text(encoding="utf-8")
            )
        catalog = catalog_from_document(json.loads(raw))
    except CatalogLoadError as e:
        logger.error(f"Invalid permission catalog {source}: {e.message}")
        raise
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load permission catalog {source}: {e}")
        raise CatalogLoadError(f"Failed to load permission catalog {source}: {e}", details={"source": source}) from e

    if expected_version and catalog.version != expected_version:
        logger.error(f"Catalog version mismatch: expected {expected_version}, got {catalog.version}")
        raise CatalogLoadError(
            f"Catalog version mismatch: expected {expected_version}, got {catalog.version}",
            details={"source": source, "expected": expected_version, "actual": catalog.version},
        )

    summary = catalog.summary()
    logger.info(
        f"Loaded permission catalog {catalog.version}: "
        f"{summary['roles']} roles, {summary['permissions']} permissions, {summary['resources']} resources"
    )
    return catalog


def load_catalog_from_settings(settings: AuthzSettings) -> PermissionCatalog:
    """Load the catalog configured by the settings."""
    return load_catalog(settings.catalog_path, settings.catalog_version)
