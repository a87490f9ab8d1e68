from __future__ import annotations

from typing import Dict, Iterable, List

from loguru import logger

from packages.common.types import GroupBy
from packages.history.types import RawLogEntry
from packages.ledger.types import TradePair


class MalformedGroup(ValueError):
    def __init__(self, key: str, count: int):
        super().__init__(f"Trade group key={key!r} has {count} legs (expected exactly 2)")
        self.key = key
        self.count = count


def assign_roles(key: str, legs: List[RawLogEntry]) -> TradePair:
    """
    Pick base (asset) and target (cash) legs. A spot symbol like "BTCUSDT"
    names them: base currency first, quote second. Without a usable
    symbol we keep arrival order (index 0 = base).
    """
    first, second = legs
    symbol = (first.symbol or second.symbol).upper()

    if symbol:
        forward = symbol == first.currency + second.currency
        backward = symbol == second.currency + first.currency
        if forward != backward:
            if backward:
                return TradePair(key=key, base=second, target=first)
            return TradePair(key=key, base=first, target=second)

    logger.warning(
        "Cannot derive leg roles from symbol={!r} currencies={}/{} key={} - using arrival order",
        symbol,
        first.currency,
        second.currency,
        key,
    )
    return TradePair(key=key, base=first, target=second)


def group_trades(records: Iterable[RawLogEntry], group_by: GroupBy = "tradeId") -> Dict[str, TradePair]:
    """
    Group transaction-log records into two-leg trades, keyed by the
    correlation field, in first-seen key order.
    Raises MalformedGroup if any key does not have exactly two records.
    """
    buckets: Dict[str, List[RawLogEntry]] = {}
    for r in records:
        buckets.setdefault(r.correlation_key(group_by), []).append(r)

    for key, legs in buckets.items():
        if len(legs) != 2:
            raise MalformedGroup(key, len(legs))

    pairs = {key: assign_roles(key, legs) for key, legs in buckets.items()}
    logger.debug("Grouped {} records into {} trades by {}", sum(len(v) for v in buckets.values()), len(pairs), group_by)
    return pairs
