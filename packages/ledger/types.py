from __future__ import annotations

from dataclasses import astuple, dataclass
from enum import Enum

from packages.common.constants import LEDGER_DELIMITER
from packages.history.types import RawLogEntry


class TradeType(str, Enum):
    SHARE_BUY = "SHARE_BUY"
    SHARE_SELL = "SHARE_SELL"
    SHARE_IN = "SHARE_IN"
    SHARE_OUT = "SHARE_OUT"


@dataclass(frozen=True)
class TradePair:
    key: str
    base: RawLogEntry      # asset leg
    target: RawLogEntry    # cash leg


@dataclass(frozen=True)
class LedgerRow:
    """One import line. Field order is the column order of the file."""
    type: str
    date: str
    ticker: str
    quantity: str
    price: str
    fee: str
    nkd: str
    nominal: str
    currency: str
    fee_currency: str
    note: str
    link_id: str
    trade_system_id: str

    def values(self) -> tuple[str, ...]:
        return tuple(str(v) for v in astuple(self))

    def to_line(self) -> str:
        return LEDGER_DELIMITER.join(self.values())

