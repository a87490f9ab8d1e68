from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Awaitable, Callable, Mapping, Optional

from packages.common.datetime_utils import day_end_ms, day_start_ms
from packages.common.decimal_utils import to_decimal
from packages.common.types import GroupBy

# Remote query capability: {startTime, endTime, limit, cursor?} -> raw response
QueryFn = Callable[[dict[str, Any]], Awaitable[Mapping[str, Any]]]


@dataclass(frozen=True)
class DateChunk:
    """Calendar days [start..end], both inclusive."""
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"DateChunk start > end ({self.start} > {self.end})")

    @property
    def start_ms(self) -> int:
        return day_start_ms(self.start)

    @property
    def end_ms(self) -> int:
        return day_end_ms(self.end)

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def __str__(self) -> str:
        return f"{self.start.isoformat()}..{self.end.isoformat()}"


def _str(item: Mapping[str, Any], key: str) -> str:
    v = item.get(key)
    return "" if v is None else str(v)


@dataclass(frozen=True)
class RawLogEntry:
    trade_id: str
    order_id: str
    symbol: str
    side: str
    cash_flow: Decimal     # signed
    currency: str
    trade_price: str
    fee: str
    fee_rate: str
    transaction_time_ms: int
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, item: Mapping[str, Any]) -> "RawLogEntry":
        """
        Parse one transaction-log item. Raises ValueError/KeyError/TypeError
        on a malformed item (caller treats that as a malformed page).
        """
        if not isinstance(item, Mapping):
            raise TypeError(f"transaction log item must be an object (got {type(item).__name__})")

        return cls(
            trade_id=_str(item, "tradeId"),
            order_id=_str(item, "orderId"),
            symbol=_str(item, "symbol"),
            side=_str(item, "side"),
            cash_flow=to_decimal(item["cashFlow"]),
            currency=_str(item, "currency").upper(),
            trade_price=_str(item, "tradePrice"),
            fee=_str(item, "fee"),
            fee_rate=_str(item, "feeRate"),
            transaction_time_ms=int(item["transactionTime"]),
            raw=dict(item),
        )

    def correlation_key(self, group_by: GroupBy) -> str:
        if group_by == "tradeId":
            return self.trade_id
        if group_by == "orderId":
            return self.order_id
        raise ValueError(f"Unsupported group_by={group_by!r}")


@dataclass(frozen=True)
class Page:
    items: tuple[RawLogEntry, ...]
    next_cursor: Optional[str] = None

    @classmethod
    def from_response(cls, response: Any) -> Optional["Page"]:
        """
        None when the response carries no item list at all (treated as
        end-of-data by the fetcher). Raises on malformed items.
        """
        if not isinstance(response, Mapping):
            return None
        result = response.get("result")
        if not isinstance(result, Mapping):
            return None
        raw_items = result.get("list")
        if not isinstance(raw_items, list):
            return None

        cursor = result.get("nextPageCursor")
        return cls(
            items=tuple(RawLogEntry.from_api(it) for it in raw_items),
            next_cursor=str(cursor) if cursor else None,
        )
