# packages/ledger/tests/test_aggregate.py

from __future__ import annotations

from decimal import Decimal

import pytest

from packages.history.types import RawLogEntry
from packages.ledger.aggregate import MalformedGroup, group_trades


def _entry(trade_id: str, currency: str, cash_flow: str, symbol: str = "", order_id: str = "") -> RawLogEntry:
    return RawLogEntry(
        trade_id=trade_id,
        order_id=order_id or f"o-{trade_id}",
        symbol=symbol,
        side="Buy",
        cash_flow=Decimal(cash_flow),
        currency=currency,
        trade_price="20000",
        fee="",
        fee_rate="0.001",
        transaction_time_ms=0,
    )


def test_groups_pairs_in_first_seen_order():
    records = [
        _entry("t2", "ETH", "1"),
        _entry("t1", "BTC", "0.1"),
        _entry("t2", "USDT", "-2000"),
        _entry("t1", "USDT", "-3000"),
    ]

    pairs = group_trades(records)

    assert list(pairs) == ["t2", "t1"]
    assert pairs["t2"].base.currency == "ETH"
    assert pairs["t2"].target.currency == "USDT"
    assert pairs["t1"].key == "t1"


def test_group_with_three_legs_is_malformed():
    records = [
        _entry("t1", "BTC", "0.1"),
        _entry("t1", "USDT", "-3000"),
        _entry("t2", "ETH", "1"),
        _entry("t2", "USDT", "-2000"),
        _entry("t1", "USDT", "-1"),
    ]

    with pytest.raises(MalformedGroup) as ei:
        group_trades(records)

    assert ei.value.key == "t1"
    assert ei.value.count == 3


def test_unmatched_leg_is_malformed():
    with pytest.raises(MalformedGroup):
        group_trades([_entry("t1", "BTC", "0.1")])


def test_symbol_fixes_reversed_arrival_order():
    records = [
        _entry("t1", "USDT", "-3000", symbol="BTCUSDT"),
        _entry("t1", "BTC", "0.1", symbol="BTCUSDT"),
    ]

    pair = group_trades(records)["t1"]

    assert pair.base.currency == "BTC"
    assert pair.target.currency == "USDT"


def test_group_by_order_id():
    records = [
        _entry("x1", "BTC", "0.1", order_id="o1"),
        _entry("x2", "USDT", "-3000", order_id="o1"),
    ]

    pairs = group_trades(records, group_by="orderId")

    assert list(pairs) == ["o1"]
    # trade ids differ, so grouping by trade would break the pair
    with pytest.raises(MalformedGroup):
        group_trades(records, group_by="tradeId")


def test_empty_input_gives_empty_mapping():
    assert group_trades([]) == {}
