"""Record projection: keep the seven fields the harm analysis needs.

The raw storm file has 37 columns. Only the event label, the two health
counts and the two damage amount/exponent pairs matter here; everything
else (dates, locations, remarks, ...) is dropped.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping

import pandas as pd

from .errors import MalformedRecordError

logger = logging.getLogger(__name__)

# ── Raw column → projected field name ────────────────────────────
FIELD_MAP: dict[str, str] = {
    "EVTYPE": "event.type",
    "FATALITIES": "health.fatalities",
    "INJURIES": "health.injuries",
    "PROPDMG": "economic.property.damage",
    "PROPDMGEXP": "economic.property.damage.exponent",
    "CROPDMG": "economic.crop.damage",
    "CROPDMGEXP": "economic.crop.damage.exponent",
}

RAW_COLUMNS: list[str] = list(FIELD_MAP)

_COUNT_COLUMNS: tuple[str, ...] = ("FATALITIES", "INJURIES")
_AMOUNT_COLUMNS: tuple[str, ...] = ("PROPDMG", "CROPDMG")


def _parse_amount(column: str, value: object) -> float:
    """Parse a non-negative real, raising MalformedRecordError otherwise."""
    if isinstance(value, bool):
        raise MalformedRecordError(column, value, "is not a number")
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise MalformedRecordError(column, value, "is not a number") from None

    if math.isnan(number):
        raise MalformedRecordError(column, value, "is missing")
    if math.isinf(number):
        raise MalformedRecordError(column, value, "is not finite")
    if number < 0:
        raise MalformedRecordError(column, value, "is negative")
    return number


def _parse_count(column: str, value: object) -> int:
    number = _parse_amount(column, value)
    if not number.is_integer():
        raise MalformedRecordError(column, value, "is not a whole number")
    return int(number)


def _text(value: object) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def project(raw: Mapping[str, object]) -> dict[str, object]:
    """Select and rename the seven analysis fields of one raw record.

    Counts must be whole non-negative numbers and damage amounts
    non-negative reals; text fields are passed through as strings with
    missing values turned into "".

    Args:
        raw: One raw row, keyed by the original upper-case column names.

    Returns:
        Projected record keyed by the dotted field names in FIELD_MAP.

    Raises:
        MalformedRecordError: A column is absent or a numeric field does
            not parse as a valid value.
    """
    missing = [c for c in RAW_COLUMNS if c not in raw]
    if missing:
        raise MalformedRecordError(missing[0], None, "is absent from the record")

    projected: dict[str, object] = {}
    for column, field in FIELD_MAP.items():
        value = raw[column]
        if column in _COUNT_COLUMNS:
            projected[field] = _parse_count(column, value)
        elif column in _AMOUNT_COLUMNS:
            projected[field] = _parse_amount(column, value)
        else:
            projected[field] = _text(value)
    return projected


def select_raw_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Keep only the raw columns the projector reads.

    Dropping the other 30 columns up front keeps memory low before the
    per-record pass.

    Args:
        df: Raw storm DataFrame as loaded from the CSV.

    Returns:
        DataFrame with only the columns in RAW_COLUMNS, in that order.

    Raises:
        KeyError: The table lacks one of the required columns.
    """
    missing = [c for c in RAW_COLUMNS if c not in df.columns]
    if missing:
        raise KeyError(f"Expected columns not found in data: {missing}")

    before_cols = len(df.columns)
    df_selected = df[RAW_COLUMNS].copy()

    logger.info(
        "Column selection: kept %d of %d columns (dropped %d)",
        len(RAW_COLUMNS),
        before_cols,
        before_cols - len(RAW_COLUMNS),
    )
    return df_selected
