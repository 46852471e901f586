"""
Domain Errors

Typed failures raised by LocalGrid services. Every error is raised either
before any write happens or inside ``transaction.atomic()``, so raising one
always rolls the whole unit back. The API layer turns them into responses
(see ``shared.infrastructure.exceptions``).
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base class for all domain failures."""

    code = "domain_error"
    status_code = 400
    default_message = "Operation failed"

    def __init__(self, message: str | None = None, **context: Any) -> None:
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"detail": self.message, "code": self.code}
        payload.update(self.context)
        return payload


class NotFound(DomainError):
    """Unknown booking, listing or user id."""

    code = "not_found"
    status_code = 404
    default_message = "Not found"


class Forbidden(DomainError):
    """Actor lacks permission for the requested operation."""

    code = "forbidden"
    status_code = 403
    default_message = "You do not have permission to perform this action"


class InvalidTransition(DomainError):
    """Requested status change is not an edge of the booking state graph."""

    code = "invalid_transition"
    default_message = "Invalid status transition"


class InvalidInterval(DomainError):
    """End of a time slot is not after its start."""

    code = "invalid_interval"
    default_message = "End time must be after start time"


class InactiveListing(DomainError):
    code = "inactive_listing"
    default_message = "Listing is not active"


class Conflict(DomainError):
    """Time slot overlaps a confirmed booking."""

    code = "conflict"
    status_code = 409
    default_message = "Time slot is already booked"


class TooEarly(DomainError):
    """Completion requested before the booking has ended."""

    code = "too_early"
    default_message = "Cannot complete booking before end time"


class InsufficientCredits(DomainError):
    code = "insufficient_credits"
    default_message = "Insufficient credits"


class InvalidCreditOperation(DomainError):
    """Malformed ledger request (non-positive amount, self-transfer)."""

    code = "invalid_credit_operation"
    default_message = "Invalid credit operation"


class InvalidAmount(DomainError):
    """Negative price or credit amount on a booking."""

    code = "invalid_amount"
    default_message = "Amounts must not be negative"
