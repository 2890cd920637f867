"""Feature modules of erp-authz-core."""
