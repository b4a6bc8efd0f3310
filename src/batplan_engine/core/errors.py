"""Typed error kinds raised by the planning engine.

Every planning failure is fatal to the run: inputs are static, so nothing is
retried and no partial plan is returned.
"""

from datetime import datetime
from typing import Optional, Sequence


class PlanningError(Exception):
    """Base class for all planning failures."""

    pass


class InvalidConfig(PlanningError):
    """Raised when battery parameters are malformed or out of range."""

    pass


class EmptyPriceSeries(PlanningError):
    """Raised when no price data is available."""

    pass


class InputValidationError(PlanningError):
    """Raised when forecast, price, or plan data fails validation."""

    pass


class PriceAlignmentError(PlanningError):
    """Raised when a timestamp cannot be mapped onto exactly one price interval."""

    def __init__(self, message: str, timestamp: Optional[datetime] = None):
        super().__init__(message)
        self.timestamp = timestamp


class NoCoveringPriceInterval(PriceAlignmentError):
    """Raised when no price interval contains the timestamp."""

    pass


class AmbiguousPriceInterval(PriceAlignmentError):
    """Raised when overlapping price intervals both contain the timestamp."""

    def __init__(
        self,
        message: str,
        timestamp: Optional[datetime] = None,
        candidates: Sequence = (),
    ):
        super().__init__(message, timestamp)
        self.candidates = list(candidates)
