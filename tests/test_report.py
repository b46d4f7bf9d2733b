import sys
import os
import io
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models import ClientAccount
from report import format_decimal, write_accounts


class TestFormatDecimal:
    def test_strips_trailing_zeros(self):
        assert format_decimal(Decimal("1.5000")) == "1.5"
        assert format_decimal(Decimal("2.0")) == "2"

    def test_no_exponent_for_round_numbers(self):
        assert format_decimal(Decimal("100")) == "100"
        assert format_decimal(Decimal("1000.00")) == "1000"

    def test_rounds_to_four_places(self):
        assert format_decimal(Decimal("1.23456")) == "1.2346"
        assert format_decimal(Decimal("0.0001")) == "0.0001"

    def test_zero(self):
        assert format_decimal(Decimal("0")) == "0"
        assert format_decimal(Decimal("0.0000")) == "0"
        assert format_decimal(Decimal("0.00001")) == "0"

    def test_values_beyond_default_precision(self):
        assert format_decimal(Decimal("1000000000000000000000000")) == "1000000000000000000000000"
        assert format_decimal(Decimal("123456789012345678901234567890.12345")) == "123456789012345678901234567890.1234"


class TestWriteAccounts:
    def test_writes_sorted_rows(self):
        accounts = {
            2: ClientAccount(client_id=2, available=Decimal("2"), held=Decimal("0.5")),
            1: ClientAccount(client_id=1, available=Decimal("1.5"), locked=True),
        }
        out = io.StringIO()

        write_accounts(accounts, out)

        assert out.getvalue().splitlines() == [
            "client,available,held,total,locked",
            "1,1.5,0,1.5,true",
            "2,2,0.5,2.5,false",
        ]

    def test_header_only_when_no_accounts(self):
        out = io.StringIO()
        write_accounts({}, out)
        assert out.getvalue() == "client,available,held,total,locked\n"

    def test_large_balance_does_not_cut_output_short(self):
        accounts = {
            1: ClientAccount(client_id=1, available=Decimal("2.5")),
            2: ClientAccount(client_id=2, available=Decimal("1E+24")),
        }
        out = io.StringIO()

        write_accounts(accounts, out)

        assert out.getvalue().splitlines() == [
            "client,available,held,total,locked",
            "1,2.5,0,2.5,false",
            "2,1000000000000000000000000,0,1000000000000000000000000,false",
        ]
