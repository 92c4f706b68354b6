"""
Status and type enumerations.

Status columns are stored as strings; every state machine exposes a
transition check so invalid transitions are rejected before any write.
"""

from enum import Enum, StrEnum
from typing import TypeVar

from capital.utils.exceptions import InvalidTransitionError


S = TypeVar("S", bound=Enum)


class DepositStatus(StrEnum):
    """Deposit request status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class WithdrawalStatus(StrEnum):
    """Withdrawal request status."""

    PENDING = "pending"
    # Counted by the daily limit, never written by this engine
    APPROVED = "approved"
    COMPLETED = "completed"
    REJECTED = "rejected"


class InvestmentStatus(StrEnum):
    """VIP investment status."""

    ACTIVE = "active"
    COMPLETED = "completed"


class CommissionStatus(StrEnum):
    """Referral commission status."""

    PENDING = "pending"
    PAID = "paid"


class TransactionType(StrEnum):
    """Wallet transaction (audit entry) kind."""

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    VIP_PURCHASE = "vip_purchase"
    EARNING = "earning"
    COMMISSION = "commission"


class TransactionStatus(StrEnum):
    """Wallet transaction status."""

    PENDING = "pending"
    COMPLETED = "completed"
    REJECTED = "rejected"


class WalletStat(StrEnum):
    """Informational wallet counters."""

    TOTAL_INVESTED = "total_invested"
    TOTAL_EARNED = "total_earned"
    TOTAL_WITHDRAWN = "total_withdrawn"


DEPOSIT_TRANSITIONS: dict[DepositStatus, frozenset[DepositStatus]] = {
    DepositStatus.PENDING: frozenset(
        {DepositStatus.APPROVED, DepositStatus.REJECTED}
    ),
    DepositStatus.APPROVED: frozenset(),
    DepositStatus.REJECTED: frozenset(),
}

WITHDRAWAL_TRANSITIONS: dict[WithdrawalStatus, frozenset[WithdrawalStatus]] = {
    WithdrawalStatus.PENDING: frozenset(
        {WithdrawalStatus.COMPLETED, WithdrawalStatus.REJECTED}
    ),
    WithdrawalStatus.APPROVED: frozenset(),
    WithdrawalStatus.COMPLETED: frozenset(),
    WithdrawalStatus.REJECTED: frozenset(),
}

INVESTMENT_TRANSITIONS: dict[InvestmentStatus, frozenset[InvestmentStatus]] = {
    InvestmentStatus.ACTIVE: frozenset({InvestmentStatus.COMPLETED}),
    InvestmentStatus.COMPLETED: frozenset(),
}

COMMISSION_TRANSITIONS: dict[CommissionStatus, frozenset[CommissionStatus]] = {
    CommissionStatus.PENDING: frozenset({CommissionStatus.PAID}),
    CommissionStatus.PAID: frozenset(),
}

TRANSACTION_TRANSITIONS: dict[TransactionStatus, frozenset[TransactionStatus]] = {
    TransactionStatus.PENDING: frozenset(
        {TransactionStatus.COMPLETED, TransactionStatus.REJECTED}
    ),
    TransactionStatus.COMPLETED: frozenset(),
    TransactionStatus.REJECTED: frozenset(),
}


def check_transition(
    transitions: dict[S, frozenset[S]], current: str, target: S
) -> S:
    """
    Validate a status transition.

    Args:
        transitions: Allowed transitions table
        current: Current status value
        target: Requested status

    Returns:
        The target status

    Raises:
        InvalidTransitionError: If the transition is not allowed
    """
    current_status = type(target)(current)
    if target not in transitions[current_status]:
        raise InvalidTransitionError(
            f"Cannot move from {current_status.value} to {target.value}",
            current_status=current_status.value,
        )
    return target
