import logging

from exceptions import (
    AccountLocked,
    AccountStateInconsistent,
    ClientMismatch,
    DisputeIgnored,
    DuplicateTransactionId,
    InsufficientFunds,
    InvalidAmount,
    InvalidDisputeState,
    TransactionRejected,
    UnknownTransaction,
)
from history import HistoryEntry, TransactionHistory
from ledger import AccountLedger
from models import (
    Chargeback,
    ClientAccount,
    Deposit,
    Dispute,
    DisputeAction,
    DisputeState,
    FundsTransaction,
    ProcessingResult,
    Resolve,
    Transaction,
    Withdrawal,
)

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions, one at a time, to the ledger and history.

    Every check runs before the first mutation, so a transaction is either
    applied in full or leaves no trace.
    """

    def __init__(self, ledger: AccountLedger, history: TransactionHistory):
        self._ledger = ledger
        self._history = history

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            APPLIED: Ledger and history were updated
            REJECTED: Deposit or withdrawal refused (bad amount, locked account, ...)
            IGNORED: Dispute, resolve or chargeback with nothing valid to act on
        """
        try:
            self.apply(transaction)
        except TransactionRejected as e:
            logger.warning(f"Rejected {type(e).__name__}: {e}")
            return ProcessingResult.REJECTED
        except DisputeIgnored as e:
            logger.info(f"Ignored {type(e).__name__}: {e}")
            return ProcessingResult.IGNORED
        return ProcessingResult.APPLIED

    def apply(self, transaction: Transaction) -> None:
        """Apply a transaction or raise the TransactionError explaining why not."""
        self._ledger.get_or_create(transaction.client_id)

        match transaction:
            case Deposit():
                self._handle_deposit(transaction)
            case Withdrawal():
                self._handle_withdrawal(transaction)
            case Dispute():
                self._handle_dispute(transaction)
            case Resolve():
                self._handle_resolve(transaction)
            case Chargeback():
                self._handle_chargeback(transaction)
            case _:
                raise TypeError(f"Unsupported transaction {transaction!r}")

    def _handle_deposit(self, transaction: Deposit) -> None:
        self._check_funds_transaction(transaction)

        self._ledger.update(transaction.client_id, lambda staged: staged.credit(transaction.amount))
        self._history.record_accepted(HistoryEntry(record=transaction))

    def _handle_withdrawal(self, transaction: Withdrawal) -> None:
        account = self._check_funds_transaction(transaction)

        if transaction.amount > account.available:
            raise InsufficientFunds(
                transaction.transaction_id, transaction.client_id, transaction.amount, account.available
            )

        self._ledger.update(transaction.client_id, lambda staged: staged.debit(transaction.amount))
        self._history.record_accepted(HistoryEntry(record=transaction))

    def _handle_dispute(self, transaction: Dispute) -> None:
        entry = self._find_entry(transaction, DisputeState.DISPUTED)
        account = self._ledger.get_or_create(transaction.client_id)

        # A disputed amount larger than what is available means the account
        # was already changed in a way the dispute cannot account for.
        if entry.amount > account.available:
            raise AccountStateInconsistent(
                transaction.client_id,
                f"disputed amount {entry.amount} exceeds available {account.available}",
                transaction.transaction_id,
            )

        self._ledger.update(transaction.client_id, lambda staged: staged.hold(entry.amount))
        self._history.transition(transaction.transaction_id, DisputeState.DISPUTED)

    def _handle_resolve(self, transaction: Resolve) -> None:
        entry = self._find_entry(transaction, DisputeState.RESOLVED)
        self._check_held(transaction, entry)

        self._ledger.update(transaction.client_id, lambda staged: staged.release_hold(entry.amount))
        self._history.transition(transaction.transaction_id, DisputeState.RESOLVED)

    def _handle_chargeback(self, transaction: Chargeback) -> None:
        entry = self._find_entry(transaction, DisputeState.CHARGED_BACK)
        self._check_held(transaction, entry)

        def charge_back(account: ClientAccount) -> None:
            account.remove_held(entry.amount)
            account.lock()

        self._ledger.update(transaction.client_id, charge_back)
        self._history.transition(transaction.transaction_id, DisputeState.CHARGED_BACK)
        logger.info(f"Client {transaction.client_id} locked after chargeback of tx {transaction.transaction_id}")

    def _check_funds_transaction(self, transaction: FundsTransaction) -> ClientAccount:
        if transaction.amount <= 0:
            raise InvalidAmount(transaction.transaction_id, transaction.client_id, transaction.amount)

        account = self._ledger.get_or_create(transaction.client_id)
        if account.locked:
            raise AccountLocked(transaction.transaction_id, transaction.client_id)

        # Ids are unique across deposits and withdrawals of every client.
        if transaction.transaction_id in self._history:
            raise DuplicateTransactionId(transaction.transaction_id, transaction.client_id)

        return account

    def _find_entry(self, transaction: DisputeAction, target_state: DisputeState) -> HistoryEntry:
        entry = self._history.lookup(transaction.transaction_id)

        if entry is None:
            raise UnknownTransaction(transaction.transaction_id, transaction.client_id)

        if entry.client_id != transaction.client_id:
            raise ClientMismatch(transaction.transaction_id, transaction.client_id, entry.client_id)

        if not entry.dispute_state.can_transition_to(target_state):
            raise InvalidDisputeState(
                transaction.transaction_id, transaction.client_id, entry.dispute_state, target_state
            )

        return entry

    def _check_held(self, transaction: DisputeAction, entry: HistoryEntry) -> None:
        account = self._ledger.get_or_create(transaction.client_id)
        if entry.amount > account.held:
            raise AccountStateInconsistent(
                transaction.client_id,
                f"disputed amount {entry.amount} exceeds held {account.held}",
                transaction.transaction_id,
            )
