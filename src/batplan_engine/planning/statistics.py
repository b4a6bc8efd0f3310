"""Reference price used as the charge/no-charge threshold.

The reference price is a single global mean over the whole price horizon,
computed once per planning run.
"""

from typing import Sequence

from batplan_engine.core.constants import PRICE_WEIGHTINGS, WEIGHTING_DURATION, WEIGHTING_INTERVAL
from batplan_engine.core.errors import EmptyPriceSeries, InputValidationError
from batplan_engine.core.schemas import PriceInterval, PriceSummary


def compute_reference_price(
    prices: Sequence[PriceInterval], weighting: str = WEIGHTING_INTERVAL
) -> float:
    """Compute the mean price over the horizon.

    With ``weighting="interval"`` every price interval counts once, whatever
    its length. With ``weighting="duration"`` each price counts in proportion
    to the length of its interval. Both agree when all intervals have the
    same duration.

    Args:
        prices: Price intervals
        weighting: "duration" or "interval"

    Returns:
        Reference price in currency per kWh

    Raises:
        EmptyPriceSeries: If prices is empty
        InputValidationError: If a price interval does not end after it starts
        ValueError: If weighting is unknown
    """
    if weighting not in PRICE_WEIGHTINGS:
        raise ValueError(f"Unknown price weighting {weighting!r}, expected one of {PRICE_WEIGHTINGS}")

    if len(prices) == 0:
        raise EmptyPriceSeries("Cannot compute reference price of an empty price series")

    for p in prices:
        if p.start >= p.end:
            raise InputValidationError(
                f"Price start time must be before end time at {p.start.isoformat()}"
            )

    if weighting == WEIGHTING_DURATION:
        total_hours = sum(p.duration_hours for p in prices)
        return sum(p.price_per_energy * p.duration_hours for p in prices) / total_hours

    return sum(p.price_per_energy for p in prices) / len(prices)


def summarize_prices(
    prices: Sequence[PriceInterval], weighting: str = WEIGHTING_INTERVAL
) -> PriceSummary:
    """Summarize a price series for reporting."""
    reference = compute_reference_price(prices, weighting)
    values = [p.price_per_energy for p in prices]

    return PriceSummary(
        count=len(values),
        min_price=min(values),
        max_price=max(values),
        reference_price=reference,
        weighting=weighting,
        currency=prices[0].currency,
    )
