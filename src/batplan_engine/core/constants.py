"""Canonical field names, units, and sign conventions.

SIGN CONVENTIONS:
- average_power_w: Positive = consumption from grid, negative = export
- power_w: Sign-free magnitude of battery charge/discharge power at the grid
  side; direction is carried by the action column
- resulting_charge_wh: Absolute state of charge after the interval

UNITS (internal):
- Power: W
- Energy: Wh
- Prices: currency per kWh
- Time: timezone-aware UTC timestamps, durations converted to hours

UNITS (configuration file):
- capacity, initial_charge: MWh
- max_rate: MW
- grid_limit: W

GRID IMPORT AFTER PLAN:
grid_import_w = average_power_w + charge_power_w - discharge_power_w
"""

# Unit conversions
WH_PER_MWH = 1_000_000.0
W_PER_MW = 1_000_000.0
WH_PER_KWH = 1_000.0
SECONDS_PER_HOUR = 3600.0

# Plan columns
COL_START = "start"
COL_END = "end"
COL_ACTION = "action"
COL_POWER_W = "power"
COL_RESULTING_CHARGE_WH = "resulting_charge"

PLAN_COLUMNS = [
    COL_START,
    COL_END,
    COL_ACTION,
    COL_POWER_W,
    COL_RESULTING_CHARGE_WH,
]

# Derived columns used for metrics
COL_AVERAGE_POWER_W = "average_power_w"
COL_PRICE = "price_per_kwh"
COL_DURATION_HOURS = "duration_hours"
COL_GRID_IMPORT_W = "grid_import_w"

# Reference price weighting modes, default first
WEIGHTING_INTERVAL = "interval"
WEIGHTING_DURATION = "duration"
PRICE_WEIGHTINGS = (WEIGHTING_INTERVAL, WEIGHTING_DURATION)

# Bundle file names
CONFIG_TOML = "config.toml"
CONFIG_YAML = "config.yaml"
FORECASTS_FILE = "forecasts.json"
PRICES_FILE = "day-ahead.json"
PLAN_FILE = "output_plan.json"
PLAN_PARQUET_FILE = "plan.parquet"
METRICS_FILE = "metrics.json"
METADATA_FILE = "plan_metadata.json"

# Top-level key of the plan document
PLAN_KEY = "planning"

# Tolerance for numerical comparisons
NUMERICAL_TOLERANCE = 1e-6
