"""Error hierarchy for KEEL.

Error layers:
- KeelError: Base class for all KEEL errors
- DomainError: Business rule violations, refused transitions, invalid input
- InfrastructureError: System-level failures like storage issues

Every error carries a stable ``code`` so callers can present specific guidance.
A corrupt stored payload is never raised; the persistence layer logs it and
substitutes the default payload.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from keel.domain.sea_service.service.eligibility import EligibilityReport


class KeelError(Exception):
    """Base class for all KEEL errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors (business logic violations)
# =============================================================================


class DomainError(KeelError):
    """Base class for domain/business errors."""


class NotFoundError(DomainError):
    """Resource not found."""


class ValidationError(DomainError):
    """Input validation failed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


class IllegalTransitionError(DomainError):
    """Lifecycle operation not valid in the current state."""

    def __init__(self, message: str, code: str = "ILLEGAL_TRANSITION") -> None:
        super().__init__(message, code=code)


class EligibilityNotMetError(DomainError):
    """Finalization attempted while the record is not eligible."""

    def __init__(self, report: EligibilityReport) -> None:
        self.report = report
        super().__init__(report.describe(), code="ELIGIBILITY_NOT_MET")


# =============================================================================
# Infrastructure Errors (system-level failures)
# =============================================================================


class InfrastructureError(KeelError):
    """Base class for infrastructure/system errors."""


class StorageFailureError(InfrastructureError):
    """The durable store could not complete a read or write."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="STORAGE_FAILURE")


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""
