"""Raw → clean transformation nodes for the NOAA storm database.

Each function is a Kedro node: pure input → output, no side effects.
Together they turn the raw 37-column storm file into a five-column table
of categorized events with damage in dollars, plus a report of every
record that had to be dropped.
"""

from __future__ import annotations

import logging
from typing import Any

import pandas as pd

from stormharm.cleaning import CLEANED_COLUMNS, clean
from stormharm.exponents import DamageField, has_multiplier, normalize_code, observed_codes
from stormharm.projection import select_raw_columns

logger = logging.getLogger(__name__)

SKIPPED_COLUMNS: list[str] = ["position", "field", "value", "reason"]

_EXPONENT_COLUMNS: dict[str, DamageField] = {
    "PROPDMGEXP": DamageField.PROPERTY,
    "CROPDMGEXP": DamageField.CROP,
}


# ── Node 1 ───────────────────────────────────────────────────────────
def select_storm_columns(raw_storm_data: pd.DataFrame) -> pd.DataFrame:
    """Keep only the seven columns the harm analysis reads.

    Args:
        raw_storm_data: Full raw storm DataFrame.

    Returns:
        DataFrame with EVTYPE, the health counts and the damage columns.
    """
    logger.info(
        "Raw storm data: %s rows, %s columns",
        f"{len(raw_storm_data):,}",
        len(raw_storm_data.columns),
    )
    return select_raw_columns(raw_storm_data)


# ── Node 2 ───────────────────────────────────────────────────────────
def audit_exponent_codes(storm_events_selected: pd.DataFrame) -> pd.DataFrame:
    """Count exponent codes per damage field and flag the unknown ones.

    Unknown codes decode to a multiplier of 1 during cleaning (or fail
    the record in strict mode); this table makes the size of that
    substitution visible.

    Args:
        storm_events_selected: Output of select_storm_columns.

    Returns:
        DataFrame with columns field, code, count, known, observed; one row
        per distinct case-folded code per field. ``known`` marks codes with
        a multiplier; ``observed`` marks codes present in the reference
        storm file, so a new extract with unfamiliar codes stands out.
    """
    frames: list[pd.DataFrame] = []
    for column, field in _EXPONENT_COLUMNS.items():
        counts = (
            storm_events_selected[column]
            .map(normalize_code)
            .value_counts(sort=False)
            .sort_index()
        )
        frame = pd.DataFrame(
            {
                "field": field.value,
                "code": counts.index.astype(str),
                "count": counts.to_numpy(dtype="int64"),
            }
        )
        frame["known"] = frame["code"].map(lambda code: has_multiplier(code, field)).astype(bool)
        frame["observed"] = frame["code"].isin(observed_codes(field))
        frames.append(frame)

        unknown = frame.loc[~frame["known"]]
        if len(unknown) > 0:
            logger.warning(
                "%s: %s rows carry codes with no multiplier, decoded as 1: %s",
                column,
                f"{unknown['count'].sum():,}",
                dict(zip(unknown["code"], unknown["count"])),
            )
        else:
            logger.info(
                "%s: all %d distinct codes have a multiplier",
                column,
                len(frame),
            )

        new_codes = frame.loc[~frame["observed"], "code"].tolist()
        if new_codes:
            logger.info("%s: codes not seen in the reference file: %s", column, new_codes)

    return pd.concat(frames, ignore_index=True)


# ── Node 3 ───────────────────────────────────────────────────────────
def clean_storm_events(
    storm_events_selected: pd.DataFrame,
    cleaning: dict[str, Any],
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Categorize event types and convert damage to dollars.

    Records are cleaned one at a time; a record with a bad numeric field
    is either skipped and reported, or aborts the run, depending on
    ``cleaning["on_malformed"]``.

    Args:
        storm_events_selected: Output of select_storm_columns.
        cleaning: Cleaning parameters (on_malformed, strict_exponents,
            n_workers).

    Returns:
        Tuple of (cleaned table with CLEANED_COLUMNS in input order,
        skipped-record report with SKIPPED_COLUMNS).
    """
    records = storm_events_selected.to_dict("records")
    result = clean(
        records,
        on_malformed=cleaning.get("on_malformed", "skip"),
        strict_exponents=cleaning.get("strict_exponents", False),
        n_workers=cleaning.get("n_workers", 1),
    )

    cleaned = pd.DataFrame(result.records, columns=CLEANED_COLUMNS)
    cleaned = cleaned.astype(
        {
            "health.fatalities": "int64",
            "health.injuries": "int64",
            "economic.property.damage": "float64",
            "economic.crop.damage": "float64",
        }
    )

    skipped = pd.DataFrame(
        [(s.position, s.field, s.value, s.reason) for s in result.skipped],
        columns=SKIPPED_COLUMNS,
    )
    # Mixed types in value break parquet/CSV round trips
    skipped["value"] = skipped["value"].astype(str)

    if len(skipped) > 0:
        logger.warning(
            "Skipped %s malformed records. By field: %s. Samples: %s",
            f"{len(skipped):,}",
            skipped["field"].value_counts().to_dict(),
            skipped.head(10).to_dict("records"),
        )

    category_counts = cleaned["event.type"].value_counts().to_dict()
    logger.info(
        "Event category distribution: %s",
        {k: f"{v:,}" for k, v in category_counts.items()},
    )
    logger.info(
        "Clean storm events: %s rows; property damage $%s, crop damage $%s",
        f"{len(cleaned):,}",
        f"{cleaned['economic.property.damage'].sum():,.0f}",
        f"{cleaned['economic.crop.damage'].sum():,.0f}",
    )
    return cleaned, skipped
