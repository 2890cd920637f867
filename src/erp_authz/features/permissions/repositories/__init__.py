"""Data access for the permissions feature."""

from .catalog_loader import catalog_from_document, load_catalog, load_catalog_from_settings

__all__ = ["catalog_from_document", "load_catalog", "load_catalog_from_settings"]
