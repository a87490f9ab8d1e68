# packages/common/tests/test_common_utils.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from packages.common.datetime_utils import (
    format_ledger_datetime,
    ms_to_iso8601_z,
    parse_iso_date,
    today_minus_one_month_iso,
)
from packages.common.decimal_utils import abs_fixed, to_decimal, to_fixed


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("-100", "100"),
        ("2000000", "2000000"),
        ("-0.00000001", "0.00000001"),
        ("1E-18", "0.000000000000000001"),
        ("1.5E+30", "1500000000000000000000000000000"),
        ("100.5000", "100.5"),
        ("-0", "0"),
        ("0.000", "0"),
    ],
)
def test_abs_fixed(raw, expected):
    assert abs_fixed(raw) == expected


def test_to_fixed_keeps_every_digit():
    digits = "123456789012345678901234567890.123456789012345678901234567890"
    assert to_fixed(Decimal(digits)) == digits.rstrip("0")


def test_to_decimal_rejects_floats_and_garbage():
    with pytest.raises(TypeError):
        to_decimal(0.1)
    with pytest.raises(ValueError):
        to_decimal("abc")
    with pytest.raises(ValueError):
        to_decimal("NaN")


def test_ledger_datetime_format():
    assert format_ledger_datetime(1_700_000_000_000) == "14.11.2023 22:13:20"
    assert ms_to_iso8601_z(1_700_000_000_000) == "2023-11-14T22:13:20.000Z"
    # inclusive chunk end renders at millisecond precision
    assert ms_to_iso8601_z(86_400_000 - 1) == "1970-01-01T23:59:59.999Z"


def test_parse_iso_date_is_strict():
    assert parse_iso_date("2024-02-29") == date(2024, 2, 29)
    with pytest.raises(ValueError):
        parse_iso_date("2023-02-29")
    with pytest.raises(ValueError):
        parse_iso_date("20230101")


@pytest.mark.parametrize(
    "today, expected",
    [
        (date(2025, 5, 1), "2025-04-01"),
        (date(2025, 1, 15), "2024-12-15"),
        (date(2025, 3, 31), "2025-02-28"),
        (date(2024, 3, 31), "2024-02-29"),
    ],
)
def test_today_minus_one_month(today, expected):
    assert today_minus_one_month_iso(today) == expected
