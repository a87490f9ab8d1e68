from __future__ import annotations

# Source-system id written into every ledger row.
TRADE_SYSTEM_ID: str = "bybit"
INTEGRATION_NAME: str = "bybit-integration"

# Bybit transaction log: max 50 items per page, max 7 days per query.
CHUNK_SIZE_DAYS: int = 7
PAGE_LIMIT: int = 50
PAGE_DELAY_MS: int = 50

BUY_SIDE: str = "Buy"
SETTLEMENT_CURRENCY: str = "USD"

CSV_FORMAT_VERSION_LINE: str = "#CsvFormatVersion:v1"
LEDGER_COLUMNS: tuple[str, ...] = (
    "TYPE",
    "DATE",
    "TICKER",
    "QUANTITY",
    "PRICE",
    "FEE",
    "NKD",
    "NOMINAL",
    "CURRENCY",
    "FEE_CURRENCY",
    "NOTE",
    "LINK_ID",
    "TRADE_SYSTEM_ID",
)
LEDGER_DELIMITER: str = ";"
CSV_HEADER: str = CSV_FORMAT_VERSION_LINE + "\n" + LEDGER_DELIMITER.join(LEDGER_COLUMNS)
