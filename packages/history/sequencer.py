from __future__ import annotations

from typing import Any, List

from loguru import logger

from packages.history.chunking import DateLike, date_chunks
from packages.history.fetcher import PaginatedFetcher
from packages.history.types import DateChunk, RawLogEntry


class ChunkSequencer:
    """
    Walks the chunk plan strictly in order. Each chunk is fully fetched
    before the next one starts - the remote rate limit is shared, so
    chunks are never fetched concurrently.
    """

    def __init__(self, fetcher: PaginatedFetcher, *, log: Any = None):
        self._fetcher = fetcher
        self._log = log or logger.bind(component="sequencer")

    async def _process_chunk(self, chunk: DateChunk, index: int, total: int) -> List[RawLogEntry]:
        self._log.info("Processing chunk {}/{} [{}]", index + 1, total, chunk)

        records = await self._fetcher.fetch(chunk)
        if records:
            self._log.info("Found {} records in chunk {}/{} [{}]", len(records), index + 1, total, chunk)
        else:
            self._log.info("No records found in chunk {}/{} [{}]", index + 1, total, chunk)
        return records

    async def run(self, start_date: DateLike, end_date: DateLike, chunk_size_days: int) -> List[RawLogEntry]:
        # Validation errors surface here, before any remote call.
        chunks = date_chunks(start_date, end_date, chunk_size_days)
        self._log.info("Generated {} date chunks", len(chunks))

        records: List[RawLogEntry] = []
        for i, chunk in enumerate(chunks):
            records.extend(await self._process_chunk(chunk, i, len(chunks)))

        self._log.info("Processing complete total_records={}", len(records))
        if not records:
            self._log.warning("No records found for the specified period {}..{}", start_date, end_date)

        return records
