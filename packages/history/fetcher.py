from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable, List, Optional

from loguru import logger

from packages.common.constants import PAGE_DELAY_MS, PAGE_LIMIT
from packages.common.datetime_utils import ms_to_iso8601_z
from packages.history.types import DateChunk, Page, QueryFn, RawLogEntry

Sleep = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class FetchSettings:
    page_limit: int = PAGE_LIMIT
    page_delay_ms: int = PAGE_DELAY_MS


class PaginatedFetcher:
    """
    Drains one date chunk through cursor pagination.

    Never raises for remote trouble: a failing or malformed page ends the
    chunk and whatever was accumulated before it is returned.
    """

    def __init__(
        self,
        query_fn: QueryFn,
        *,
        cfg: FetchSettings | None = None,
        sleep: Sleep = asyncio.sleep,
        log: Any = None,
    ):
        self._query = query_fn
        self.cfg = cfg or FetchSettings()
        self._sleep = sleep
        self._log = log or logger.bind(component="fetcher")

    def _request(self, chunk: DateChunk, cursor: Optional[str]) -> dict[str, Any]:
        req: dict[str, Any] = {
            "startTime": chunk.start_ms,
            "endTime": chunk.end_ms,
            "limit": self.cfg.page_limit,
        }
        if cursor:
            req["cursor"] = cursor
        return req

    async def iter_pages(self, chunk: DateChunk) -> AsyncIterator[Page]:
        cursor: Optional[str] = None
        page_no = 1

        while True:
            self._log.debug(
                "Fetching transaction log page={} [{}..{}] cursor={}",
                page_no,
                ms_to_iso8601_z(chunk.start_ms),
                ms_to_iso8601_z(chunk.end_ms),
                cursor,
            )

            try:
                response = await self._query(self._request(chunk, cursor))
                page = Page.from_response(response)
            except Exception as e:
                self._log.error(
                    "Error fetching transaction log page={} chunk={} error={}",
                    page_no,
                    chunk,
                    e,
                )
                return

            if page is None:
                self._log.warning("No list in response page={} chunk={} response={!r}", page_no, chunk, response)
                return

            self._log.debug("Received {} items page={}", len(page.items), page_no)
            yield page

            if not page.next_cursor:
                return

            if page.next_cursor == cursor:
                self._log.warning("Cursor did not advance (cursor={}) page={} - stopping", cursor, page_no)
                return

            await self._sleep(self.cfg.page_delay_ms / 1000.0)
            cursor = page.next_cursor
            page_no += 1

    async def fetch(self, chunk: DateChunk) -> List[RawLogEntry]:
        items: List[RawLogEntry] = []
        async for page in self.iter_pages(chunk):
            items.extend(page.items)
        return items
