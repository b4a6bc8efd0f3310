"""Plan serialization helpers for JSON and Parquet."""

import json
from pathlib import Path

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq
from pydantic import ValidationError

from batplan_engine.core.constants import (
    COL_ACTION,
    COL_END,
    COL_START,
    PLAN_COLUMNS,
    PLAN_KEY,
)
from batplan_engine.core.errors import InputValidationError
from batplan_engine.core.schemas import Plan, PlanEntry


def ensure_columns(df: pd.DataFrame, required_columns: list[str]) -> None:
    """Ensure dataframe has required columns.

    Raises:
        ValueError: If any required columns are missing
    """
    missing = set(required_columns) - set(df.columns)
    if missing:
        raise ValueError(f"Missing required columns: {missing}")


def plan_to_records(plan: Plan) -> list[dict]:
    """Convert plan entries to JSON-ready output records."""
    return [entry.model_dump(mode="json") for entry in plan.entries]


def plan_to_frame(plan: Plan) -> pd.DataFrame:
    """Convert a plan to a dataframe indexed by interval start.

    Args:
        plan: Generated plan

    Returns:
        DataFrame with DatetimeIndex named "start" and columns
        end, action, power, resulting_charge
    """
    records = [entry.model_dump() for entry in plan.entries]
    df = pd.DataFrame(records, columns=PLAN_COLUMNS)

    df[COL_START] = pd.to_datetime(df[COL_START], utc=True)
    df[COL_END] = pd.to_datetime(df[COL_END], utc=True)
    df[COL_ACTION] = [entry.action.value for entry in plan.entries]

    df = df.set_index(COL_START)
    df.index.name = COL_START

    return df


def write_plan_json(plan: Plan, path: str | Path) -> None:
    """Write the plan document {"planning": [...]} to path."""
    with open(path, "w") as f:
        json.dump({PLAN_KEY: plan_to_records(plan)}, f, indent=2)


def read_plan_json(path: str | Path) -> list[PlanEntry]:
    """Read plan entries from a plan document.

    Raises:
        InputValidationError: If the document is malformed
    """
    with open(path) as f:
        try:
            document = json.load(f)
        except json.JSONDecodeError as e:
            raise InputValidationError(f"Plan file {path} is not valid JSON: {e}") from e

    if PLAN_KEY not in document:
        raise InputValidationError(f"Plan file {path} has no '{PLAN_KEY}' list")

    try:
        return [PlanEntry(**record) for record in document[PLAN_KEY]]
    except ValidationError as e:
        raise InputValidationError(f"Plan file {path} has invalid entries: {e}") from e


def write_plan_parquet(plan: Plan, path: str | Path) -> None:
    """Write plan to Parquet file.

    Args:
        plan: Generated plan
        path: Output path
    """
    df_out = plan_to_frame(plan).reset_index()

    table = pa.Table.from_pandas(df_out, preserve_index=False)
    pq.write_table(table, str(path), compression="snappy")


def read_plan_parquet(path: str | Path) -> pd.DataFrame:
    """Read a plan written by write_plan_parquet.

    Returns:
        DataFrame with DatetimeIndex named "start"
    """
    df = pd.read_parquet(path)
    ensure_columns(df, PLAN_COLUMNS)

    df[COL_START] = pd.to_datetime(df[COL_START], utc=True)
    df = df.set_index(COL_START)
    df.index.name = COL_START

    return df
