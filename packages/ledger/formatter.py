from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from packages.common.constants import BUY_SIDE, SETTLEMENT_CURRENCY, TRADE_SYSTEM_ID
from packages.common.datetime_utils import format_ledger_datetime
from packages.common.decimal_utils import abs_fixed
from packages.ledger.types import LedgerRow, TradePair, TradeType


@dataclass(frozen=True)
class LedgerFormatter:
    """
    TradePair -> (asset leg row, cash leg row).

    Buy:  asset leg SHARE_BUY,  cash leg SHARE_OUT
    else: asset leg SHARE_SELL, cash leg SHARE_IN

    The fee sits on the asset leg and is taken from the cash leg; the cash
    leg is a unit-priced, fee-free movement booked in the settlement
    currency.
    """
    settlement_currency: str = SETTLEMENT_CURRENCY
    trade_system_id: str = TRADE_SYSTEM_ID
    buy_side: str = BUY_SIDE
    timezone: str = "UTC"

    def format(self, pair: TradePair) -> Tuple[LedgerRow, LedgerRow]:
        base, target = pair.base, pair.target

        is_buy = base.side == self.buy_side
        type_in = TradeType.SHARE_BUY if is_buy else TradeType.SHARE_SELL
        type_out = TradeType.SHARE_OUT if is_buy else TradeType.SHARE_IN

        date = format_ledger_datetime(base.transaction_time_ms, self.timezone)

        asset_leg = LedgerRow(
            type=type_in.value,
            date=date,
            ticker=f"{base.currency}:{base.currency}",
            quantity=abs_fixed(base.cash_flow),
            price=base.trade_price,
            fee=target.fee_rate,
            nkd="",
            nominal="",
            currency=target.currency,
            fee_currency=target.currency,
            note="",
            link_id=pair.key,
            trade_system_id=self.trade_system_id,
        )

        cash_leg = LedgerRow(
            type=type_out.value,
            date=date,
            ticker=f"{target.currency}:{target.currency}",
            quantity=abs_fixed(target.cash_flow),
            price="1",
            fee="0",
            nkd="",
            nominal="",
            currency=self.settlement_currency,
            fee_currency=self.settlement_currency,
            note="",
            link_id=pair.key,
            trade_system_id=self.trade_system_id,
        )

        return asset_leg, cash_leg

    def format_lines(self, pair: TradePair) -> str:
        return "\n".join(row.to_line() for row in self.format(pair))
