"""Domain-level exceptions and the failure taxonomy.

Request problems found by the trackers are *classified* with an ErrorKind
and returned as structured results so forms can show them per field.
Everything that is raised is a subclass of DomainException, so the outer
layers can catch it uniformly.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from recon.domain.model.fulfillment import ValidationResult
    from recon.domain.model.payment import PaymentValidationResult


class ErrorKind(Enum):
    UNKNOWN_LINE = "UNKNOWN_LINE"
    NON_POSITIVE_QUANTITY = "NON_POSITIVE_QUANTITY"
    EXCEEDS_REMAINING = "EXCEEDS_REMAINING"
    EMPTY_REQUEST = "EMPTY_REQUEST"
    INVALID_ADJUSTMENT = "INVALID_ADJUSTMENT"
    DATA_INTEGRITY_WARNING = "DATA_INTEGRITY_WARNING"
    NON_POSITIVE_AMOUNT = "NON_POSITIVE_AMOUNT"
    EXCEEDS_OUTSTANDING = "EXCEEDS_OUTSTANDING"
    SUB_CENT_AMOUNT = "SUB_CENT_AMOUNT"


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class InvalidAdjustmentError(ValidationError):
    """A monetary input (price, discount, tax rate, shipping) is invalid."""

    kind = ErrorKind.INVALID_ADJUSTMENT

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class FulfillmentRejectedError(ValidationError):
    """A fulfillment request did not pass validation.

    Carries the full structured result so callers can still render
    every failing line.
    """

    def __init__(self, result: ValidationResult) -> None:
        super().__init__(
            "; ".join(failure.message for failure in result.failures)
            or "Fulfillment request rejected"
        )
        self.result = result


class PaymentRejectedError(ValidationError):
    """A payment did not pass validation against the outstanding balance."""

    def __init__(self, result: PaymentValidationResult) -> None:
        super().__init__(result.message or "Payment rejected")
        self.result = result


class DataIntegrityError(DomainException):
    """Upstream data is malformed beyond what can be clamped."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class ConcurrencyConflictError(DomainException):
    """The stored entity changed since it was read (stale version)."""
