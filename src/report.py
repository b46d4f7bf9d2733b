import csv
from decimal import Context, Decimal
from typing import Dict, TextIO

from models import ClientAccount

OUTPUT_FIELDS = ("client", "available", "held", "total", "locked")
PRECISION = Decimal("0.0001")


def format_decimal(value: Decimal) -> str:
    """Format decimal with up to 4 decimal places, removing trailing zeros."""
    # Enough digits for the whole integer part plus four places.
    context = Context(prec=max(28, value.adjusted() + 6))
    normalized = value.quantize(PRECISION, context=context).normalize(context)
    if normalized.is_zero():
        return "0"
    return f"{normalized:f}"


def account_row(account: ClientAccount) -> list:
    return [
        account.client_id,
        format_decimal(account.available),
        format_decimal(account.held),
        format_decimal(account.total),
        str(account.locked).lower(),
    ]


def write_accounts(accounts: Dict[int, ClientAccount], stream: TextIO) -> None:
    """Write one CSV row per client, ordered by client id."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_FIELDS)
    for client_id in sorted(accounts):
        writer.writerow(account_row(accounts[client_id]))
