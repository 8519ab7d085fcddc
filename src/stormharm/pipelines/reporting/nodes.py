"""Clean → report nodes: harm totals per event category.

Architecture:
    aggregate → single groupby on event.type (all ten categories kept)
    rank      → top-N categories by human harm / by economic harm
    plot      → stacked bar charts, saved by the catalog
"""

from __future__ import annotations

import logging

import matplotlib
import matplotlib.pyplot as plt
import pandas as pd

from stormharm.event_types import EventCategory

matplotlib.use("Agg")  # non-interactive backend for CI / headless runs

logger = logging.getLogger(__name__)

HEALTH_COLUMNS: list[str] = ["health.fatalities", "health.injuries"]
ECONOMIC_COLUMNS: list[str] = ["economic.property.damage", "economic.crop.damage"]

_CATEGORY_ORDER: list[str] = [c.value for c in EventCategory]


# ── Node 1: Category aggregation ─────────────────────────────────
def aggregate_by_category(storm_events_clean: pd.DataFrame) -> pd.DataFrame:
    """Sum health and economic harm for each event category.

    Every category appears in the output, even when no event fell into
    it, so downstream charts and API responses have a fixed shape.

    Args:
        storm_events_clean: Cleaned event-level table.

    Returns:
        DataFrame with one row per category: event.type, events, the four
        summed harm columns, health.total and economic.total.
    """
    summary = storm_events_clean.groupby("event.type").agg(
        events=("health.fatalities", "size"),
        **{col: (col, "sum") for col in HEALTH_COLUMNS + ECONOMIC_COLUMNS},
    )
    summary = summary.reindex(_CATEGORY_ORDER, fill_value=0)
    summary.index.name = "event.type"
    summary = summary.reset_index()

    int_cols = ["events"] + HEALTH_COLUMNS
    summary[int_cols] = summary[int_cols].astype("int64")
    summary[ECONOMIC_COLUMNS] = summary[ECONOMIC_COLUMNS].astype("float64")

    summary["health.total"] = summary[HEALTH_COLUMNS].sum(axis=1)
    summary["economic.total"] = summary[ECONOMIC_COLUMNS].sum(axis=1)

    logger.info(
        "Aggregated %s events into %d categories: %s fatalities, "
        "%s injuries, $%s total damage",
        f"{len(storm_events_clean):,}",
        len(summary),
        f"{summary['health.fatalities'].sum():,}",
        f"{summary['health.injuries'].sum():,}",
        f"{summary['economic.total'].sum():,.0f}",
    )
    return summary


def _rank(summary: pd.DataFrame, by: str, top_n: int) -> pd.DataFrame:
    if top_n < 1:
        raise ValueError(f"top_n must be at least 1, got {top_n}")
    return (
        summary.sort_values([by, "event.type"], ascending=[False, True], kind="stable")
        .head(top_n)
        .reset_index(drop=True)
    )


# ── Node 2 ───────────────────────────────────────────────────────
def rank_population_health(harm_by_category: pd.DataFrame, top_n: int) -> pd.DataFrame:
    """Top-N categories by fatalities + injuries."""
    ranking = _rank(harm_by_category, "health.total", top_n)[
        ["event.type"] + HEALTH_COLUMNS + ["health.total"]
    ]
    logger.info(
        "Most harmful to population health: %s",
        ranking["event.type"].tolist(),
    )
    return ranking


# ── Node 3 ───────────────────────────────────────────────────────
def rank_economic_damage(harm_by_category: pd.DataFrame, top_n: int) -> pd.DataFrame:
    """Top-N categories by property + crop damage dollars."""
    ranking = _rank(harm_by_category, "economic.total", top_n)[
        ["event.type"] + ECONOMIC_COLUMNS + ["economic.total"]
    ]
    logger.info(
        "Greatest economic consequences: %s",
        ranking["event.type"].tolist(),
    )
    return ranking


# ── Node 4 ───────────────────────────────────────────────────────
def plot_population_health(population_health_ranking: pd.DataFrame) -> plt.Figure:
    """Stacked bar chart of fatalities and injuries per category."""
    categories = population_health_ranking["event.type"]
    fatalities = population_health_ranking["health.fatalities"]
    injuries = population_health_ranking["health.injuries"]

    fig, ax = plt.subplots(figsize=(9, 5))
    ax.bar(categories, fatalities, label="Fatalities", color="firebrick")
    ax.bar(categories, injuries, bottom=fatalities, label="Injuries", color="orange")
    ax.set_xlabel("Event category")
    ax.set_ylabel("People")
    ax.set_title("Fatalities and Injuries by Event Category")
    ax.tick_params(axis="x", labelrotation=45)
    ax.legend()
    fig.tight_layout()
    return fig


# ── Node 5 ───────────────────────────────────────────────────────
def plot_economic_damage(economic_damage_ranking: pd.DataFrame) -> plt.Figure:
    """Stacked bar chart of property and crop damage (billions of dollars)."""
    categories = economic_damage_ranking["event.type"]
    property_bn = economic_damage_ranking["economic.property.damage"] / 1e9
    crop_bn = economic_damage_ranking["economic.crop.damage"] / 1e9

    fig, ax = plt.subplots(figsize=(9, 5))
    ax.bar(categories, property_bn, label="Property", color="steelblue")
    ax.bar(categories, crop_bn, bottom=property_bn, label="Crop", color="seagreen")
    ax.set_xlabel("Event category")
    ax.set_ylabel("Damage (billions of USD)")
    ax.set_title("Property and Crop Damage by Event Category")
    ax.tick_params(axis="x", labelrotation=45)
    ax.legend()
    fig.tight_layout()
    return fig
