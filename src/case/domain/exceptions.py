"""Exceptions raised by the case service."""

from shared.domain.exceptions import NotFound, PortalError


class RequisitionValidationError(PortalError):
    """Raised with the first violation found in a requisition draft."""

    error_code = "validation_error"

    def __init__(self, violation):
        super().__init__(violation.message, {"code": violation.code, "field": violation.field})
        self.violation = violation


class CaseNotFound(NotFound):
    error_code = "case_not_found"


class ConsentNotFound(NotFound):
    error_code = "consent_not_found"


class InvalidStatus(PortalError):
    """Raised when a status change names a value outside the status enum."""

    error_code = "invalid_status"
