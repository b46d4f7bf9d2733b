"""Exception hierarchy for the payments engine."""

from typing import Optional


class PaymentsError(Exception):
    """Base exception for all payments engine errors."""


class ConfigError(PaymentsError):
    """Invalid engine settings."""


class TransactionFormatError(PaymentsError, ValueError):
    """An input record cannot be turned into a transaction."""


class TransactionError(PaymentsError):
    """A single transaction could not be applied."""

    def __init__(self, transaction_id: Optional[int], client_id: Optional[int], message: str) -> None:
        self.transaction_id = transaction_id
        self.client_id = client_id
        subject = []
        if transaction_id is not None:
            subject.append(f"tx {transaction_id}")
        if client_id is not None:
            subject.append(f"client {client_id}")
        super().__init__(f"{', '.join(subject)}: {message}")


class TransactionRejected(TransactionError):
    """Deposit or withdrawal refused. State is unchanged."""


class InvalidAmount(TransactionRejected):
    def __init__(self, transaction_id: int, client_id: int, amount) -> None:
        self.amount = amount
        super().__init__(transaction_id, client_id, f"invalid amount {amount}")


class AccountLocked(TransactionRejected):
    def __init__(self, transaction_id: int, client_id: int) -> None:
        super().__init__(transaction_id, client_id, "account is locked")


class InsufficientFunds(TransactionRejected):
    def __init__(self, transaction_id: int, client_id: int, amount, available) -> None:
        self.amount = amount
        self.available = available
        super().__init__(
            transaction_id, client_id, f"cannot withdraw {amount}, only {available} available"
        )


class DuplicateTransactionId(TransactionRejected):
    def __init__(self, transaction_id: int, client_id: int) -> None:
        super().__init__(transaction_id, client_id, "transaction id already processed")


class DisputeIgnored(TransactionError):
    """Dispute, resolve or chargeback referencing something it cannot act on."""


class UnknownTransaction(DisputeIgnored):
    def __init__(self, transaction_id: int, client_id: Optional[int]) -> None:
        super().__init__(transaction_id, client_id, "referenced transaction not found")


class ClientMismatch(DisputeIgnored):
    def __init__(self, transaction_id: int, client_id: int, owner_id: int) -> None:
        self.owner_id = owner_id
        super().__init__(
            transaction_id, client_id, f"transaction belongs to client {owner_id}"
        )


class InvalidDisputeState(DisputeIgnored):
    def __init__(self, transaction_id: int, client_id: int, current, requested) -> None:
        self.current = current
        self.requested = requested
        super().__init__(
            transaction_id,
            client_id,
            f"cannot move from {current.value} to {requested.value}",
        )


class AccountStateInconsistent(DisputeIgnored):
    """Applying the transaction would drive available or held funds below zero."""

    def __init__(self, client_id: int, message: str, transaction_id: Optional[int] = None) -> None:
        super().__init__(transaction_id, client_id, message)
