"""Failure kinds raised by the ledger engine.

Every engine operation either commits completely or raises one of these.  The
engine never retries; :class:`ConcurrencyConflict` is the only kind a caller
may resubmit unchanged.
"""

from __future__ import annotations

from typing import Any


class LedgerError(Exception):
    """Base class for all engine failures."""

    code = "ledger_error"
    retryable = False
    default_message = "The operation could not be completed."

    def __init__(self, message: str | None = None, **detail: Any) -> None:
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class LedgerValidationError(LedgerError):
    code = "validation_error"
    default_message = "The request is invalid."


class NotFound(LedgerError):
    code = "not_found"
    default_message = "The referenced record does not exist."


class InsufficientStock(LedgerError):
    code = "insufficient_stock"
    default_message = "Insufficient stock."


class InvalidUnitInput(LedgerError):
    code = "invalid_unit_input"
    default_message = "Invalid carton/piece input."


class TierUnavailable(LedgerError):
    code = "tier_unavailable"
    default_message = "The requested price tier is not available for this item."


class ReturnExceedsOriginal(LedgerError):
    code = "return_exceeds_original"
    default_message = "Return quantity exceeds the remaining returnable quantity."


class NegativeBalanceGuard(LedgerError):
    code = "negative_balance"
    default_message = "The balance may not drop below zero."


class OverpaymentNotAllowed(LedgerError):
    code = "overpayment"
    default_message = "Payment amount exceeds the outstanding balance."


class ConcurrencyConflict(LedgerError):
    code = "concurrency_conflict"
    retryable = True
    default_message = "The records are being modified concurrently; retry the operation."


__all__ = [
    "ConcurrencyConflict",
    "InsufficientStock",
    "InvalidUnitInput",
    "LedgerError",
    "LedgerValidationError",
    "NegativeBalanceGuard",
    "NotFound",
    "OverpaymentNotAllowed",
    "ReturnExceedsOriginal",
    "TierUnavailable",
]
