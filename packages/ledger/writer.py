from __future__ import annotations

from pathlib import Path
from typing import Iterable

from loguru import logger

from packages.common.constants import CSV_HEADER
from packages.ledger.types import LedgerRow


def ledger_file_name(start_date: str, end_date: str) -> str:
    return f"bybit_trades_{start_date}_to_{end_date}.csv"


def render_ledger(rows: Iterable[LedgerRow]) -> str:
    """Format-version line, column header, then one line per row."""
    return "\n".join([CSV_HEADER, *(r.to_line() for r in rows)])


def write_ledger(path: Path, rows: Iterable[LedgerRow]) -> Path:
    rows = list(rows)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_ledger(rows), encoding="utf-8")
    logger.info("Ledger written path={} rows={}", path, len(rows))
    return path
