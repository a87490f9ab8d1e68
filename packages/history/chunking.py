from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import List, Union

from packages.common.datetime_utils import parse_iso_date
from packages.history.types import DateChunk

DateLike = Union[str, date]


class InvalidDateFormat(ValueError):
    pass


class InvalidRange(ValueError):
    pass


def _coerce_date(value: DateLike, name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return parse_iso_date(value)
        except ValueError as e:
            raise InvalidDateFormat(
                f"Invalid {name}={value!r}. Please use YYYY-MM-DD format."
            ) from e
    raise InvalidDateFormat(f"Invalid {name}={value!r}. Please use YYYY-MM-DD format.")


def date_chunks(start_date: DateLike, end_date: DateLike, chunk_size_days: int) -> List[DateChunk]:
    """
    Split [start_date..end_date] (calendar days, both inclusive) into
    consecutive chunks of at most chunk_size_days days. The last chunk ends
    exactly at end_date.

      date_chunks("2023-01-01", "2023-01-15", 7)
        -> [01..07], [08..14], [15..15]
    """
    start = _coerce_date(start_date, "start_date")
    end = _coerce_date(end_date, "end_date")

    if start > end:
        raise InvalidRange(f"start_date must not be after end_date ({start} > {end})")

    if int(chunk_size_days) < 1:
        raise ValueError(f"chunk_size_days must be >= 1 (got {chunk_size_days})")

    if start == end:
        return [DateChunk(start=start, end=end)]

    step = timedelta(days=int(chunk_size_days))
    one_day = timedelta(days=1)

    out: List[DateChunk] = []
    cur = start
    while cur <= end:
        chunk_end = min(cur + step - one_day, end)
        out.append(DateChunk(start=cur, end=chunk_end))
        cur = chunk_end + one_day

    return out
