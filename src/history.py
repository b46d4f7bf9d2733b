import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional

from exceptions import DuplicateTransactionId, InvalidDisputeState, UnknownTransaction
from models import DisputeState, FundsTransaction

logger = logging.getLogger(__name__)


@dataclass
class HistoryEntry:
    record: FundsTransaction
    dispute_state: DisputeState = DisputeState.NORMAL
    sequence: int = 0

    @property
    def transaction_id(self) -> int:
        return self.record.transaction_id

    @property
    def client_id(self) -> int:
        return self.record.client_id

    @property
    def amount(self) -> Decimal:
        return self.record.amount


class RetentionPolicy:
    """Keeps every entry forever."""

    def should_evict(self, entry: HistoryEntry, age: int) -> bool:
        return False


class DisputeWindow(RetentionPolicy):
    """
    Drops entries once they are max_age accepted transactions old.
    Open disputes are kept until they are resolved or charged back.
    """

    def __init__(self, max_age: int):
        if max_age < 1:
            raise ValueError(f"max_age must be positive, got {max_age}")
        self.max_age = max_age

    def should_evict(self, entry: HistoryEntry, age: int) -> bool:
        return age >= self.max_age and entry.dispute_state is not DisputeState.DISPUTED

    def __repr__(self) -> str:
        return f"DisputeWindow(max_age={self.max_age})"


class TransactionHistory:
    """
    Accepted deposits and withdrawals keyed by transaction id,
    with the dispute state of each one.
    """

    def __init__(self, retention_policy: Optional[RetentionPolicy] = None):
        self._entries: Dict[int, HistoryEntry] = {}
        self._retention_policy = retention_policy or RetentionPolicy()
        self._sequence = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, transaction_id: int) -> bool:
        return transaction_id in self._entries

    @property
    def retention_policy(self) -> RetentionPolicy:
        return self._retention_policy

    def record_accepted(self, entry: HistoryEntry) -> None:
        """Store an accepted transaction for future dispute lookups."""
        if entry.transaction_id in self._entries:
            raise DuplicateTransactionId(entry.transaction_id, entry.client_id)

        self._sequence += 1
        entry.sequence = self._sequence
        self._entries[entry.transaction_id] = entry

    def lookup(self, transaction_id: int) -> Optional[HistoryEntry]:
        return self._entries.get(transaction_id)

    def transition(self, transaction_id: int, new_state: DisputeState) -> HistoryEntry:
        entry = self._entries.get(transaction_id)
        if entry is None:
            raise UnknownTransaction(transaction_id, None)

        if not entry.dispute_state.can_transition_to(new_state):
            raise InvalidDisputeState(transaction_id, entry.client_id, entry.dispute_state, new_state)

        entry.dispute_state = new_state
        return entry

    def evict_expired(self) -> int:
        """Drop entries the retention policy no longer needs. Returns how many were dropped."""
        expired = [
            transaction_id
            for transaction_id, entry in self._entries.items()
            if self._retention_policy.should_evict(entry, self._sequence - entry.sequence)
        ]
        for transaction_id in expired:
            del self._entries[transaction_id]

        if expired:
            logger.debug(f"Evicted {len(expired)} history entries ({self._retention_policy!r})")
        return len(expired)
