from __future__ import annotations

from typing import Literal

# Field of a transaction-log item that links the two legs of one trade.
GroupBy = Literal["tradeId", "orderId"]
