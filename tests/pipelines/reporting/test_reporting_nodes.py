"""Tests for the clean → report Kedro nodes."""

import matplotlib.pyplot as plt
import pandas as pd
import pytest

from stormharm.cleaning import clean
from stormharm.event_types import EventCategory
from stormharm.pipelines.reporting.nodes import (
    aggregate_by_category,
    plot_economic_damage,
    plot_population_health,
    rank_economic_damage,
    rank_population_health,
)


@pytest.fixture()
def raw_records():
    labels = ["TORNADO", "TSTM WIND", "HAIL", "FLASH FLOOD", "TORNADO",
              "EXCESSIVE HEAT", "HEAVY SNOW", "TSTM WIND/HAIL"]
    return [
        {
            "EVTYPE": label,
            "FATALITIES": float(i % 3),
            "INJURIES": float(i * 2),
            "PROPDMG": float(i + 1),
            "PROPDMGEXP": "K" if i % 2 else "M",
            "CROPDMG": float(i),
            "CROPDMGEXP": "K",
        }
        for i, label in enumerate(labels)
    ]


@pytest.fixture()
def storm_events_clean(raw_records):
    return pd.DataFrame(clean(raw_records).records)


# ── Aggregation ──────────────────────────────────────────────────
class TestAggregateByCategory:
    def test_one_row_per_category(self, storm_events_clean):
        summary = aggregate_by_category(storm_events_clean)
        assert summary["event.type"].tolist() == [c.value for c in EventCategory]

    def test_empty_categories_are_zero(self, storm_events_clean):
        summary = aggregate_by_category(storm_events_clean).set_index("event.type")
        assert summary.loc["lightning", "events"] == 0
        assert summary.loc["lightning", "economic.total"] == 0

    def test_fatalities_are_conserved(self, raw_records, storm_events_clean):
        summary = aggregate_by_category(storm_events_clean)
        assert summary["health.fatalities"].sum() == sum(r["FATALITIES"] for r in raw_records)
        assert summary["health.injuries"].sum() == sum(r["INJURIES"] for r in raw_records)
        assert summary["events"].sum() == len(raw_records)

    def test_sums(self, storm_events_clean):
        summary = aggregate_by_category(storm_events_clean).set_index("event.type")
        # TORNADO rows are i=0 and i=4: property 1M + 5M, crop 0 + 4K
        assert summary.loc["tornado", "events"] == 2
        assert summary.loc["tornado", "economic.property.damage"] == 6_000_000
        assert summary.loc["tornado", "economic.crop.damage"] == 4_000
        assert summary.loc["tornado", "economic.total"] == 6_004_000
        # "TSTM WIND/HAIL" counts as hail
        assert summary.loc["hail", "events"] == 2

    def test_totals(self, storm_events_clean):
        summary = aggregate_by_category(storm_events_clean)
        assert (
            summary["health.total"]
            == summary["health.fatalities"] + summary["health.injuries"]
        ).all()

    def test_empty_input(self):
        empty = pd.DataFrame(
            columns=["event.type", "health.fatalities", "health.injuries",
                     "economic.property.damage", "economic.crop.damage"]
        )
        summary = aggregate_by_category(empty)
        assert len(summary) == len(EventCategory)
        assert summary["events"].sum() == 0


# ── Rankings ─────────────────────────────────────────────────────
class TestRankings:
    @pytest.fixture()
    def summary(self, storm_events_clean):
        return aggregate_by_category(storm_events_clean)

    def test_population_health_descending(self, summary):
        ranking = rank_population_health(summary, top_n=3)
        assert len(ranking) == 3
        assert ranking["health.total"].is_monotonic_decreasing
        assert list(ranking.columns) == [
            "event.type", "health.fatalities", "health.injuries", "health.total",
        ]

    def test_economic_descending(self, summary):
        ranking = rank_economic_damage(summary, top_n=10)
        assert ranking["economic.total"].is_monotonic_decreasing
        # HEAVY SNOW (i=6): 7M property + 6K crop
        assert ranking["event.type"].iloc[0] == "snow"
        assert ranking["event.type"].iloc[1] == "tornado"

    def test_ties_broken_by_name(self, summary):
        ranking = rank_economic_damage(summary, top_n=10)
        zeros = ranking.loc[ranking["economic.total"] == 0, "event.type"].tolist()
        assert zeros == sorted(zeros)

    def test_invalid_top_n(self, summary):
        with pytest.raises(ValueError, match="top_n"):
            rank_population_health(summary, top_n=0)


# ── Charts ───────────────────────────────────────────────────────
class TestCharts:
    def test_population_chart(self, storm_events_clean):
        ranking = rank_population_health(aggregate_by_category(storm_events_clean), 5)
        fig = plot_population_health(ranking)
        ax = fig.axes[0]
        assert len(ax.patches) == 2 * len(ranking)
        assert ax.get_title() == "Fatalities and Injuries by Event Category"
        plt.close(fig)

    def test_economic_chart(self, storm_events_clean):
        ranking = rank_economic_damage(aggregate_by_category(storm_events_clean), 5)
        fig = plot_economic_damage(ranking)
        assert len(fig.axes[0].patches) == 2 * len(ranking)
        plt.close(fig)
