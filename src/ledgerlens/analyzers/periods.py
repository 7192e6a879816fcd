"""
Period Bucketer — split a date range into contiguous time buckets.

Buckets drive every time-series in LedgerLens:
1. **Keys** — ``2025-04-01`` (day), ``2025-W14`` (ISO week), ``2025-04``
   (month), ``2025-Q2`` (quarter), ``2025`` (year).
2. **Contiguity** — empty buckets are still emitted so charts get a
   continuous axis.
3. **Assignment** — each transaction lands in exactly one bucket by date.

Also hosts the date helpers shared by the budget and goal engines
(calendar month arithmetic, previous-window and elapsed-time math).
"""

from __future__ import annotations

import calendar
import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from ledgerlens.models.financial import Transaction

logger = logging.getLogger("ledgerlens.analyzers.periods")


class Granularity(str, Enum):
    """Bucket size for time series."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


@dataclass(frozen=True)
class Bucket:
    """One time slot of a series."""

    key: str
    start: date
    end: date

    def contains(self, d: date) -> bool:
        return self.start <= d <= self.end


def add_months(d: date, months: int) -> date:
    """Shift a date by whole calendar months.

    Month overflow rolls into the next/previous year and the day is clamped
    to the target month's length (Jan 31 + 1 month -> Feb 28/29).
    """
    index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def bucket_key(d: date, granularity: Granularity) -> str:
    """Return the bucket key a date falls into."""
    granularity = Granularity(granularity)

    if granularity == Granularity.DAY:
        return d.isoformat()
    elif granularity == Granularity.WEEK:
        iso_year, iso_week, _ = d.isocalendar()
        return f"{iso_year}-W{iso_week:02d}"
    elif granularity == Granularity.MONTH:
        return f"{d.year}-{d.month:02d}"
    elif granularity == Granularity.QUARTER:
        return f"{d.year}-Q{(d.month - 1) // 3 + 1}"
    return str(d.year)


def bucket_start(d: date, granularity: Granularity) -> date:
    """First day of the bucket containing ``d``."""
    granularity = Granularity(granularity)

    if granularity == Granularity.DAY:
        return d
    elif granularity == Granularity.WEEK:
        return d - timedelta(days=d.weekday())
    elif granularity == Granularity.MONTH:
        return d.replace(day=1)
    elif granularity == Granularity.QUARTER:
        return date(d.year, ((d.month - 1) // 3) * 3 + 1, 1)
    return date(d.year, 1, 1)


def bucket_end(d: date, granularity: Granularity) -> date:
    """Last day of the bucket containing ``d``."""
    granularity = Granularity(granularity)
    start = bucket_start(d, granularity)

    if granularity == Granularity.DAY:
        return start
    elif granularity == Granularity.WEEK:
        return start + timedelta(days=6)
    elif granularity == Granularity.MONTH:
        return add_months(start, 1) - timedelta(days=1)
    elif granularity == Granularity.QUARTER:
        return add_months(start, 3) - timedelta(days=1)
    return date(d.year, 12, 31)


def build_buckets(start: date, end: date, granularity: Granularity) -> list[Bucket]:
    """
    Build the ordered, contiguous bucket sequence covering ``[start, end]``.

    The first and last buckets are clamped to the range, so a range starting
    mid-month yields a partial first month.

    Args:
        start: First day of the range (inclusive).
        end: Last day of the range (inclusive).
        granularity: Bucket size.

    Returns:
        Buckets in chronological order, one per slot, empty slots included.

    Raises:
        ValueError: If ``start`` is after ``end``.
    """
    if start > end:
        raise ValueError(f"Invalid date range: start {start} is after end {end}")

    granularity = Granularity(granularity)
    buckets: list[Bucket] = []
    cursor = start

    while cursor <= end:
        slot_end = min(bucket_end(cursor, granularity), end)
        buckets.append(Bucket(key=bucket_key(cursor, granularity), start=cursor, end=slot_end))
        cursor = slot_end + timedelta(days=1)

    return buckets


def assign_buckets(
    transactions: Iterable[Transaction],
    buckets: list[Bucket],
    granularity: Granularity,
) -> dict[str, list[Transaction]]:
    """Group transactions by bucket key.

    Every bucket key is present in the result, even with no transactions.
    Range filtering is the caller's job; a transaction whose key is not in
    the sequence is left out.
    """
    grouped: dict[str, list[Transaction]] = defaultdict(list)
    for bucket in buckets:
        grouped[bucket.key] = []

    for txn in transactions:
        key = bucket_key(txn.date, granularity)
        if key not in grouped:
            logger.debug(f"Transaction {txn.id or '?'} on {txn.date} falls outside bucket range")
            continue
        grouped[key].append(txn)

    return dict(grouped)


def previous_range(start: date, end: date) -> tuple[date, date]:
    """The window of the same length that ends the day before ``start``."""
    if start > end:
        raise ValueError(f"Invalid date range: start {start} is after end {end}")
    prev_end = start - timedelta(days=1)
    return prev_end - (end - start), prev_end


_LOOKBACK_MONTHS = {
    "month": 1,
    "quarter": 3,
    "year": 12,
}
TIMEFRAMES = ("week", *_LOOKBACK_MONTHS, "custom")


def resolve_range(
    timeframe: str,
    start: date | None = None,
    end: date | None = None,
    today: date | None = None,
) -> tuple[date, date]:
    """
    Turn a report timeframe into concrete dates.

    ``week``/``month``/``quarter``/``year`` look back from ``end`` (default
    today) unless ``start`` is given. ``custom`` requires both dates.

    Raises:
        ValueError: For an unknown timeframe, a ``custom`` timeframe without
            both dates, or ``start`` after ``end``.
    """
    if timeframe not in TIMEFRAMES:
        raise ValueError(f"Unknown timeframe: {timeframe!r} (expected one of {', '.join(TIMEFRAMES)})")

    if timeframe == "custom":
        if start is None or end is None:
            raise ValueError("Start date and end date are required for custom timeframe")
        if start > end:
            raise ValueError(f"Invalid date range: start {start} is after end {end}")
        return start, end

    end = end or today or date.today()
    if start is None:
        if timeframe == "week":
            start = end - timedelta(days=7)
        else:
            start = add_months(end, -_LOOKBACK_MONTHS[timeframe])

    if start > end:
        raise ValueError(f"Invalid date range: start {start} is after end {end}")
    return start, end


def elapsed_percentage(start: date, end: date, today: date) -> float:
    """How much of ``[start, end]`` has passed on ``today``, 0-100."""
    if today < start:
        return 0.0
    if today >= end:
        return 100.0
    return (today - start).days / (end - start).days * 100
