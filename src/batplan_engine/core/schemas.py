"""Pydantic schemas for configuration, input records, and plans."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from batplan_engine.core.constants import (
    PRICE_WEIGHTINGS,
    SECONDS_PER_HOUR,
    W_PER_MW,
    WEIGHTING_INTERVAL,
    WH_PER_MWH,
)


def _as_utc(value: datetime) -> datetime:
    """Interpret naive timestamps as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Action(str, Enum):
    """Battery operation selected for a single interval."""

    CHARGE = "charge"
    DISCHARGE = "discharge"
    IDLE = "idle"


class BatteryConfig(BaseModel):
    """Battery and grid connection parameters in internal units (Wh, W).

    Ranges are enforced by ``validate_battery_config`` so that violations
    surface as ``InvalidConfig`` rather than a schema error.
    """

    model_config = ConfigDict(frozen=True)

    capacity: float = Field(..., description="Usable capacity in Wh")
    initial_charge: float = Field(..., description="State of charge at horizon start in Wh")
    max_rate: float = Field(..., description="Max charge/discharge power in W")
    efficiency: float = Field(default=0.9, description="One-way efficiency applied on charge and on discharge")
    grid_limit: float = Field(..., description="Contractual grid import ceiling in W")


class BatteryState(BaseModel):
    """State of charge carried from one simulation step to the next."""

    model_config = ConfigDict(frozen=True)

    charge: float = Field(..., description="Stored energy in Wh")


class ConsumptionInterval(BaseModel):
    """One interval of the consumption forecast."""

    model_config = ConfigDict(populate_by_name=True)

    start: datetime
    end: datetime
    average_power: float = Field(
        ...,
        alias="consumption_average_power_interval",
        description="Average consumption in W (negative = export)",
    )

    normalize_timestamps = field_validator("start", "end")(_as_utc)

    @property
    def duration_hours(self) -> float:
        return (self.end - self.start).total_seconds() / SECONDS_PER_HOUR


class PriceInterval(BaseModel):
    """One day-ahead price interval."""

    model_config = ConfigDict(populate_by_name=True)

    start: datetime
    end: datetime
    currency: str = Field(default="EUR", alias="market_price_currency")
    price_per_energy: float = Field(
        ..., alias="market_price_per_kwh", description="Price in currency per kWh"
    )

    normalize_timestamps = field_validator("start", "end")(_as_utc)

    @property
    def duration_hours(self) -> float:
        return (self.end - self.start).total_seconds() / SECONDS_PER_HOUR

    def contains(self, timestamp: datetime) -> bool:
        """Return True if timestamp falls inside [start, end)."""
        return self.start <= timestamp < self.end


class ForecastSeries(BaseModel):
    """Parsed consumption forecast document."""

    forecasts: list[ConsumptionInterval] = Field(default_factory=list)


class PriceSeries(BaseModel):
    """Parsed day-ahead price document."""

    bidding_zone: Optional[str] = None
    prices: list[PriceInterval] = Field(default_factory=list)


class PriceSummary(BaseModel):
    """Descriptive statistics of a price series."""

    count: int
    min_price: float
    max_price: float
    reference_price: float
    weighting: str
    currency: Optional[str] = None


class PlanEntry(BaseModel):
    """Planned battery operation for one forecast interval."""

    start: datetime
    end: datetime
    action: Action
    power: float = Field(default=0.0, ge=0, description="Grid-side power magnitude in W")
    resulting_charge: float = Field(..., description="State of charge after the interval in Wh")


class Plan(BaseModel):
    """Ordered plan, one entry per consumption interval."""

    entries: list[PlanEntry] = Field(default_factory=list)
    reference_price: float
    initial_charge: float

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def final_charge(self) -> float:
        if not self.entries:
            return self.initial_charge
        return self.entries[-1].resulting_charge


class PlannerSettings(BaseModel):
    """Settings as written in the configuration file (MWh, MW, W)."""

    capacity: float = Field(..., description="Battery capacity in MWh")
    initial_charge: float = Field(..., description="Initial charge in MWh")
    max_rate: float = Field(..., description="Max charge/discharge rate in MW")
    efficiency: float = Field(..., description="Efficiency fraction (0-1]")
    grid_limit: float = Field(..., description="Grid import limit in W")
    price_weighting: str = Field(
        default=WEIGHTING_INTERVAL, description="Reference price weighting mode"
    )

    @field_validator("price_weighting")
    @classmethod
    def validate_weighting(cls, v: str) -> str:
        """Ensure weighting mode is known."""
        if v not in PRICE_WEIGHTINGS:
            raise ValueError(f"price_weighting must be one of {PRICE_WEIGHTINGS}, got {v!r}")
        return v

    def to_battery_config(self) -> BatteryConfig:
        """Normalize to internal units and validate ranges.

        Raises:
            InvalidConfig: If any normalized parameter is out of range
        """
        from batplan_engine.core.validate import validate_battery_config

        config = BatteryConfig(
            capacity=self.capacity * WH_PER_MWH,
            initial_charge=self.initial_charge * WH_PER_MWH,
            max_rate=self.max_rate * W_PER_MW,
            efficiency=self.efficiency,
            grid_limit=self.grid_limit,
        )
        validate_battery_config(config)
        return config


class PlanMetadata(BaseModel):
    """Metadata for reproducibility tracking."""

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    batplan_version: str
    price_weighting: str = Field(default=WEIGHTING_INTERVAL)
    bidding_zone: Optional[str] = None
    num_intervals: int = Field(default=0, ge=0)
