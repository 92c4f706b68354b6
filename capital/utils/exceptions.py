"""
Exception types.

Defines the typed failures raised by ledger, deposit, withdrawal,
investment and referral operations. Every error carries a human-readable
message suitable for returning to the caller as-is.
"""

from decimal import Decimal


class LedgerError(Exception):
    """Base class for all engine errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """Missing or out-of-range input. No state was changed."""
    pass


class BelowMinimumError(ValidationError):
    """Amount is below the configured minimum."""

    def __init__(self, message: str, minimum: Decimal) -> None:
        super().__init__(message)
        self.minimum = minimum


class DailyLimitExceededError(ValidationError):
    """User reached the maximum number of withdrawals for today."""

    def __init__(self, message: str, limit: int) -> None:
        super().__init__(message)
        self.limit = limit


class MissingNotesError(ValidationError):
    """Rejection attempted without admin notes."""
    pass


class NotFoundError(LedgerError):
    """Referenced entity does not exist."""
    pass


class AlreadyProcessedError(LedgerError):
    """Admin action on a request that is no longer pending."""

    def __init__(self, message: str, current_status: str) -> None:
        super().__init__(message)
        self.current_status = current_status


class InvalidTransitionError(LedgerError):
    """Status transition not allowed by the state machine."""

    def __init__(self, message: str, current_status: str) -> None:
        super().__init__(message)
        self.current_status = current_status


class InsufficientFundsError(LedgerError):
    """Debit would drive the wallet balance below zero."""

    def __init__(
        self,
        message: str = "Insufficient balance",
        available: Decimal | None = None,
        requested: Decimal | None = None,
    ) -> None:
        super().__init__(message)
        self.available = available
        self.requested = requested


class InvalidReferenceError(LedgerError):
    """Input references an unknown or inactive catalog entry."""
    pass


class InvalidBankError(InvalidReferenceError):
    """Bank id does not resolve to an active bank."""
    pass


class ProductNotFoundError(InvalidReferenceError):
    """VIP level has no active product."""
    pass


class DuplicateUserError(ValidationError):
    """Phone number or referral code already registered."""
    pass
