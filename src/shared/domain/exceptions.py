"""Exceptions shared by all portal services."""

from typing import Any, Dict, Optional


class PortalError(Exception):
    """Base exception for portal errors surfaced to the operator."""

    error_code = "portal_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class PermissionDenied(PortalError):
    """Raised when the session identity may not perform an operation."""

    error_code = "permission_denied"


class NotFound(PortalError):
    """Raised when a referenced record does not exist."""

    error_code = "not_found"


class StorageError(PortalError):
    """Raised when the blob store rejects an upload."""

    error_code = "storage_error"
