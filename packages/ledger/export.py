from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from loguru import logger

from packages.common.types import GroupBy
from packages.history.chunking import DateLike
from packages.history.sequencer import ChunkSequencer
from packages.ledger.aggregate import group_trades
from packages.ledger.formatter import LedgerFormatter
from packages.ledger.types import LedgerRow
from packages.ledger.writer import ledger_file_name, write_ledger


class LedgerExporter:
    """
    fetch (chunked, paginated) -> group legs -> ledger rows -> file
    """

    def __init__(
        self,
        *,
        sequencer: ChunkSequencer,
        formatter: LedgerFormatter | None = None,
        group_by: GroupBy = "tradeId",
    ):
        self._sequencer = sequencer
        self._formatter = formatter or LedgerFormatter()
        self._group_by = group_by

    async def build_rows(self, start_date: DateLike, end_date: DateLike, chunk_size_days: int) -> List[LedgerRow]:
        records = await self._sequencer.run(start_date, end_date, chunk_size_days)
        if not records:
            return []

        pairs = group_trades(records, self._group_by)

        rows: List[LedgerRow] = []
        for pair in pairs.values():
            rows.extend(self._formatter.format(pair))
        return rows

    async def export(
        self,
        start_date: str,
        end_date: str,
        chunk_size_days: int,
        out_dir: Path,
    ) -> Optional[Path]:
        rows = await self.build_rows(start_date, end_date, chunk_size_days)
        if not rows:
            logger.warning("Nothing to export for {}..{}", start_date, end_date)
            return None

        return write_ledger(out_dir / ledger_file_name(start_date, end_date), rows)
