"""Mapping of forecast intervals onto the coarser day-ahead price grid.

Price intervals are typically hourly while forecast intervals are 15 minutes,
so one price interval serves several forecast intervals. A forecast interval
is assigned the price interval whose [start, end) contains its start.
"""

from bisect import bisect_right
from datetime import datetime
from typing import Sequence

from batplan_engine.core.errors import AmbiguousPriceInterval, NoCoveringPriceInterval
from batplan_engine.core.schemas import ConsumptionInterval, PriceInterval


class PriceTimeline:
    """Sorted index over price intervals for repeated lookups.

    Keeps the running maximum of interval ends so that overlapping intervals
    are found without scanning the whole series.
    """

    def __init__(self, prices: Sequence[PriceInterval]):
        self.prices = sorted(prices, key=lambda p: p.start)
        self._starts = [p.start for p in self.prices]

        self._max_end: list[datetime] = []
        for price in self.prices:
            if self._max_end and self._max_end[-1] > price.end:
                self._max_end.append(self._max_end[-1])
            else:
                self._max_end.append(price.end)

    def __len__(self) -> int:
        return len(self.prices)

    def candidates(self, timestamp: datetime) -> list[PriceInterval]:
        """Return every price interval containing timestamp, in start order."""
        i = bisect_right(self._starts, timestamp) - 1
        found = []
        while i >= 0 and self._max_end[i] > timestamp:
            if self.prices[i].end > timestamp:
                found.append(self.prices[i])
            i -= 1
        found.reverse()
        return found

    def lookup(self, timestamp: datetime) -> PriceInterval:
        """Return the single price interval containing timestamp.

        Raises:
            NoCoveringPriceInterval: If no interval contains timestamp
            AmbiguousPriceInterval: If more than one interval contains it
        """
        found = self.candidates(timestamp)

        if not found:
            raise NoCoveringPriceInterval(
                f"No price interval covers {timestamp.isoformat()}", timestamp
            )

        if len(found) > 1:
            spans = ", ".join(f"[{p.start.isoformat()}, {p.end.isoformat()})" for p in found)
            raise AmbiguousPriceInterval(
                f"{len(found)} price intervals cover {timestamp.isoformat()}: {spans}",
                timestamp,
                found,
            )

        return found[0]


def find_price_interval(
    interval: ConsumptionInterval, prices: Sequence[PriceInterval]
) -> PriceInterval:
    """Resolve the price interval for a single forecast interval.

    Args:
        interval: Consumption forecast interval
        prices: Price intervals sorted by start

    Returns:
        Price interval whose [start, end) contains interval.start
    """
    return PriceTimeline(prices).lookup(interval.start)


def check_price_coverage(
    forecasts: Sequence[ConsumptionInterval], prices: Sequence[PriceInterval]
) -> None:
    """Check that prices cover the forecast span without gaps or overlaps.

    Only the span from the first forecast start to the last forecast end is
    checked; price data outside it is ignored.

    Args:
        forecasts: Consumption intervals sorted by start
        prices: Price intervals sorted by start

    Raises:
        NoCoveringPriceInterval: At the first uncovered timestamp
        AmbiguousPriceInterval: At the first doubly covered timestamp
    """
    if not forecasts:
        return

    span_start = forecasts[0].start
    span_end = max(f.end for f in forecasts)

    relevant = [
        p
        for p in sorted(prices, key=lambda p: p.start)
        if p.end > span_start and p.start < span_end
    ]

    if not relevant or relevant[0].start > span_start:
        raise NoCoveringPriceInterval(
            f"No price interval covers {span_start.isoformat()}", span_start
        )

    covered_until = relevant[0].end
    for prev, cur in zip(relevant, relevant[1:]):
        if cur.start > covered_until:
            raise NoCoveringPriceInterval(
                f"Gap in price data from {covered_until.isoformat()} to {cur.start.isoformat()}",
                covered_until,
            )
        if cur.start < covered_until:
            raise AmbiguousPriceInterval(
                f"Price intervals overlap at {cur.start.isoformat()}",
                cur.start,
                [prev, cur],
            )
        covered_until = cur.end

    if covered_until < span_end:
        raise NoCoveringPriceInterval(
            f"Price data ends at {covered_until.isoformat()} before forecast end {span_end.isoformat()}",
            covered_until,
        )
