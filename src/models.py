from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import ClassVar, Dict, FrozenSet, Optional, Union

from exceptions import AccountStateInconsistent, TransactionFormatError

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class DisputeState(Enum):
    NORMAL = "normal"
    DISPUTED = "disputed"
    RESOLVED = "resolved"
    CHARGED_BACK = "charged_back"

    def can_transition_to(self, new_state: "DisputeState") -> bool:
        return new_state in _DISPUTE_TRANSITIONS[self]


_DISPUTE_TRANSITIONS: Dict[DisputeState, FrozenSet[DisputeState]] = {
    DisputeState.NORMAL: frozenset({DisputeState.DISPUTED}),
    DisputeState.DISPUTED: frozenset({DisputeState.RESOLVED, DisputeState.CHARGED_BACK}),
    DisputeState.RESOLVED: frozenset(),
    DisputeState.CHARGED_BACK: frozenset(),
}


class ProcessingResult(Enum):
    APPLIED = "applied"
    REJECTED = "rejected"
    IGNORED = "ignored"


@dataclass(frozen=True)
class Deposit:
    client_id: int
    transaction_id: int
    amount: Decimal

    transaction_type: ClassVar[TransactionType] = TransactionType.DEPOSIT


@dataclass(frozen=True)
class Withdrawal:
    client_id: int
    transaction_id: int
    amount: Decimal

    transaction_type: ClassVar[TransactionType] = TransactionType.WITHDRAWAL


@dataclass(frozen=True)
class Dispute:
    client_id: int
    transaction_id: int

    transaction_type: ClassVar[TransactionType] = TransactionType.DISPUTE


@dataclass(frozen=True)
class Resolve:
    client_id: int
    transaction_id: int

    transaction_type: ClassVar[TransactionType] = TransactionType.RESOLVE


@dataclass(frozen=True)
class Chargeback:
    client_id: int
    transaction_id: int

    transaction_type: ClassVar[TransactionType] = TransactionType.CHARGEBACK


FundsTransaction = Union[Deposit, Withdrawal]
DisputeAction = Union[Dispute, Resolve, Chargeback]
Transaction = Union[Deposit, Withdrawal, Dispute, Resolve, Chargeback]

_FUNDS_TYPES = {
    TransactionType.DEPOSIT: Deposit,
    TransactionType.WITHDRAWAL: Withdrawal,
}
_DISPUTE_ACTION_TYPES = {
    TransactionType.DISPUTE: Dispute,
    TransactionType.RESOLVE: Resolve,
    TransactionType.CHARGEBACK: Chargeback,
}


def build_transaction(
    transaction_type: TransactionType,
    client_id: int,
    transaction_id: int,
    amount: Optional[Decimal] = None,
) -> Transaction:
    """
    Build the transaction variant for a type.

    Deposits and withdrawals must carry an amount. Disputes, resolves and
    chargebacks must not: they act on the amount of the transaction they
    reference. Amount sign is left to the processor.
    """
    if not 0 <= client_id <= MAX_CLIENT_ID:
        raise TransactionFormatError(f"client id {client_id} out of range")
    if not 0 <= transaction_id <= MAX_TRANSACTION_ID:
        raise TransactionFormatError(f"transaction id {transaction_id} out of range")

    if transaction_type in _FUNDS_TYPES:
        if amount is None:
            raise TransactionFormatError(f"{transaction_type.value} tx {transaction_id} has no amount")
        if not isinstance(amount, Decimal):
            try:
                amount = Decimal(amount)
            except (InvalidOperation, TypeError, ValueError) as e:
                raise TransactionFormatError(f"invalid amount {amount!r}") from e
        if not amount.is_finite():
            raise TransactionFormatError(f"{transaction_type.value} tx {transaction_id} amount {amount} is not finite")
        return _FUNDS_TYPES[transaction_type](client_id, transaction_id, amount)

    if amount is not None:
        raise TransactionFormatError(f"{transaction_type.value} tx {transaction_id} must not carry an amount")
    return _DISPUTE_ACTION_TYPES[transaction_type](client_id, transaction_id)


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    def credit(self, amount: Decimal) -> None:
        self._set_funds(self.available + amount, self.held)

    def debit(self, amount: Decimal) -> None:
        self._set_funds(self.available - amount, self.held)

    def hold(self, amount: Decimal) -> None:
        self._set_funds(self.available - amount, self.held + amount)

    def release_hold(self, amount: Decimal) -> None:
        self._set_funds(self.available + amount, self.held - amount)

    def remove_held(self, amount: Decimal) -> None:
        self._set_funds(self.available, self.held - amount)

    def lock(self) -> None:
        self.locked = True

    def check_invariants(self) -> None:
        if self.available < 0 or self.held < 0:
            raise AccountStateInconsistent(
                self.client_id, f"negative funds (available={self.available}, held={self.held})"
            )

    def _set_funds(self, available: Decimal, held: Decimal) -> None:
        # Both values are assigned together or not at all.
        if available < 0 or held < 0:
            raise AccountStateInconsistent(
                self.client_id,
                f"update would leave available={available}, held={held}",
            )
        self.available = available
        self.held = held


class ProcessingStats:
    """Counters for tracking processing statistics."""

    def __init__(self):
        self.applied = 0
        self.rejected = 0
        self.ignored = 0
        self.malformed = 0
        self.evicted = 0

    @property
    def processed(self) -> int:
        return self.applied + self.rejected + self.ignored

    def record_result(self, result: ProcessingResult) -> None:
        if result == ProcessingResult.APPLIED:
            self.applied += 1
        elif result == ProcessingResult.REJECTED:
            self.rejected += 1
        elif result == ProcessingResult.IGNORED:
            self.ignored += 1

    def record_malformed(self) -> None:
        self.malformed += 1

    def record_evicted(self, count: int) -> None:
        self.evicted += count

    def __str__(self) -> str:
        return (
            f"Processed: {self.processed}, "
            f"Applied: {self.applied}, "
            f"Rejected: {self.rejected}, "
            f"Ignored: {self.ignored}, "
            f"Malformed: {self.malformed}, "
            f"Evicted: {self.evicted}"
        )
