"""Unit tests for amount and date parsing helpers"""

import pytest
from datetime import date
from decimal import Decimal
from emi_pay.utils.date_utils import parse_issue_date
from emi_pay.utils.money import format_money, parse_decimal, parse_payment_amount, to_json_number


def test_parse_decimal_wire_values():
    assert parse_decimal("75.00") == Decimal("75.00")
    assert parse_decimal(" 12.5 ") == Decimal("12.5")
    assert parse_decimal(24) == Decimal(24)
    assert parse_decimal(0.1) == Decimal("0.1")  # no binary float expansion


@pytest.mark.parametrize("value", [None, True, "", "abc", "NaN", "-Infinity", [1]])
def test_parse_decimal_rejects_non_numbers(value):
    with pytest.raises(ValueError):
        parse_decimal(value)


def test_parse_payment_amount():
    assert parse_payment_amount("50") == Decimal("50")
    assert parse_payment_amount("0") is None
    assert parse_payment_amount("-1") is None
    assert parse_payment_amount("fifty") is None


def test_format_money():
    assert format_money(Decimal("75")) == "75.00"
    assert format_money(Decimal("0.5")) == "0.50"


def test_to_json_number():
    assert to_json_number(Decimal("50.00")) == 50
    assert isinstance(to_json_number(Decimal("50.00")), int)
    assert to_json_number(Decimal("12.34")) == 12.34


def test_parse_issue_date():
    assert parse_issue_date("2024-01-15") == date(2024, 1, 15)
    assert parse_issue_date("2024-01-15T00:00:00.000Z") == date(2024, 1, 15)
    assert parse_issue_date("2024-01-15T10:30:00+05:30") == date(2024, 1, 15)

    with pytest.raises(ValueError):
        parse_issue_date("15/01/2024")
    with pytest.raises(ValueError):
        parse_issue_date(20240115)
