import csv
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator, Optional

from exceptions import TransactionFormatError
from models import Transaction, TransactionType, build_transaction


def read_csv_rows(stream: Iterable[str]) -> Iterator[Dict[str, Optional[str]]]:
    """
    Yield raw CSV rows as dicts keyed by header name.
    Works on any iterable of text lines: an open file, stdin, a socket's makefile().
    """
    reader = csv.DictReader(stream, skipinitialspace=True)
    for row in reader:
        yield row


def parse_csv_row(row: Dict[str, Optional[str]]) -> Transaction:
    """Parse CSV row into a transaction variant."""
    # Extra trailing fields land under a None key; short rows have None values.
    normalized = {
        key.strip().lower(): (value or "").strip()
        for key, value in row.items()
        if key is not None
    }

    try:
        transaction_type = TransactionType(normalized["type"].lower())
    except KeyError:
        raise TransactionFormatError("missing 'type' column") from None
    except ValueError:
        raise TransactionFormatError(f"unknown transaction type {normalized['type']!r}") from None

    client_id = _parse_id(normalized, "client")
    transaction_id = _parse_id(normalized, "tx")

    amount = None
    amount_str = normalized.get("amount", "")
    if amount_str:
        try:
            amount = Decimal(amount_str)
        except InvalidOperation:
            raise TransactionFormatError(f"invalid amount {amount_str!r}") from None

    return build_transaction(transaction_type, client_id, transaction_id, amount)


def _parse_id(normalized: Dict[str, str], column: str) -> int:
    if column not in normalized:
        raise TransactionFormatError(f"missing {column!r} column")
    try:
        return int(normalized[column])
    except ValueError:
        raise TransactionFormatError(f"invalid {column} {normalized[column]!r}") from None
