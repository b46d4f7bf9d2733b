import logging
from typing import Dict, Iterable, Optional

from config import EngineSettings, build_settings
from exceptions import TransactionFormatError
from history import TransactionHistory
from ledger import AccountLedger
from models import ClientAccount, ProcessingStats, Transaction
from reader import parse_csv_row, read_csv_rows
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Orchestrates transaction processing.
    Transactions are applied strictly one at a time in arrival order.
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self._settings = settings if settings is not None else build_settings()
        self._ledger = AccountLedger()
        self._history = TransactionHistory(self._settings.retention_policy())
        self._processor = TransactionProcessor(self._ledger, self._history)
        self._stats = ProcessingStats()

    @property
    def ledger(self) -> AccountLedger:
        return self._ledger

    @property
    def history(self) -> TransactionHistory:
        return self._history

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing transactions from {filepath}")
        with open(filepath, "r", encoding="utf-8", newline="") as f:
            return self.process_stream(f)

    def process_stream(self, stream: Iterable[str]) -> Dict[int, ClientAccount]:
        """Process CSV lines from any text stream and return final account states."""
        return self.process_transactions(self._parse_transactions(stream))

    def process_transactions(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """Apply transactions in order and return final account states."""
        eviction_enabled = self._settings.dispute_window is not None

        for transaction in transactions:
            result = self._processor.process_transaction(transaction)
            self._stats.record_result(result)

            if eviction_enabled and self._stats.processed % self._settings.eviction_interval == 0:
                self._stats.record_evicted(self._history.evict_expired())

        logger.info(str(self._stats))
        return self._ledger.get_all_accounts()

    def _parse_transactions(self, stream: Iterable[str]) -> Iterable[Transaction]:
        for row_number, row in enumerate(read_csv_rows(stream), start=1):
            try:
                yield parse_csv_row(row)
            except TransactionFormatError as e:
                self._stats.record_malformed()
                logger.warning(f"Failed to parse row {row_number} {row}: {e}")
