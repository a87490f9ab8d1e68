# packages/history/tests/test_sequencer.py

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List

import pytest

from packages.common.datetime_utils import day_start_ms
from packages.history.chunking import InvalidRange
from packages.history.fetcher import PaginatedFetcher
from packages.history.sequencer import ChunkSequencer


async def _no_sleep(_: float) -> None:
    return None


@dataclass
class PerChunkQuery:
    """
    Serves one page per chunk, keyed by the chunk's startTime. Tracks how
    many queries are in flight to prove the sequencer never overlaps them.
    """
    pages: Dict[int, List[dict]] = field(default_factory=dict)
    calls: List[dict] = field(default_factory=list)
    in_flight: int = 0
    max_in_flight: int = 0

    async def __call__(self, params: dict) -> Any:
        self.calls.append(dict(params))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            items = self.pages.get(params["startTime"], [])
            return {"result": {"list": items, "nextPageCursor": ""}}
        finally:
            self.in_flight -= 1


def _item(trade_id: str) -> dict:
    return {"tradeId": trade_id, "cashFlow": "1", "currency": "BTC", "transactionTime": "0"}


def _sequencer(query: PerChunkQuery) -> ChunkSequencer:
    return ChunkSequencer(PaginatedFetcher(query, sleep=_no_sleep))


def test_chunks_processed_in_order_and_concatenated():
    query = PerChunkQuery(pages={
        day_start_ms(date(2024, 11, 1)): [_item("w1a"), _item("w1b")],
        # second week is empty
        day_start_ms(date(2024, 11, 15)): [_item("w3")],
    })

    records = asyncio.run(_sequencer(query).run("2024-11-01", "2024-11-20", 7))

    assert [r.trade_id for r in records] == ["w1a", "w1b", "w3"]
    assert [c["startTime"] for c in query.calls] == [
        day_start_ms(date(2024, 11, 1)),
        day_start_ms(date(2024, 11, 8)),
        day_start_ms(date(2024, 11, 15)),
    ]
    assert query.max_in_flight == 1


def test_single_day_without_records_is_empty_not_error():
    query = PerChunkQuery()

    records = asyncio.run(_sequencer(query).run("2024-11-01", "2024-11-01", 7))

    assert records == []
    assert len(query.calls) == 1


def test_invalid_range_fails_before_any_query():
    query = PerChunkQuery()

    with pytest.raises(InvalidRange):
        asyncio.run(_sequencer(query).run("2023-01-10", "2023-01-05", 7))

    assert query.calls == []
