"""Base exceptions for erp-authz-core.

All exceptions inherit from AuthzCoreError and carry an error code and a
details mapping so that host services can render structured responses.
"""

from typing import Any, Dict, Optional


class AuthzCoreError(Exception):
    """Base exception for all erp-authz-core errors.

    The error code defaults to the class name when not supplied.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        *args,
        **kwargs
    ):
        super().__init__(message, *args, **kwargs)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


def create_error_response(exception: AuthzCoreError) -> Dict[str, Any]:
    """Create standardized error response from exception.

    Args:
        exception: The erp-authz-core exception

    Returns:
        Error response dictionary
    """
    return {
        "error": {
            "code": exception.error_code,
            "message": exception.message,
            "details": exception.details,
            "type": exception.__class__.__name__,
        }
    }
