"""Clean → report pipeline: harm totals, rankings and charts.

Node dependency graph:
    storm_events_clean -> [aggregate_by_category] -> harm_by_category
    harm_by_category   -> [rank_population_health] -> population_health_ranking
    harm_by_category   -> [rank_economic_damage]   -> economic_damage_ranking
    population_health_ranking -> [plot_population_health] -> population_health_chart
    economic_damage_ranking   -> [plot_economic_damage]   -> economic_damage_chart

The health and economic branches are independent of each other.
"""

from kedro.pipeline import Pipeline, node, pipeline

from .nodes import (
    aggregate_by_category,
    plot_economic_damage,
    plot_population_health,
    rank_economic_damage,
    rank_population_health,
)


def create_pipeline(**kwargs) -> Pipeline:  # noqa: ARG001
    """Create the reporting pipeline."""
    return pipeline(
        [
            node(
                func=aggregate_by_category,
                inputs="storm_events_clean",
                outputs="harm_by_category",
                name="aggregate_by_category",
            ),
            node(
                func=rank_population_health,
                inputs=["harm_by_category", "params:reporting.top_n"],
                outputs="population_health_ranking",
                name="rank_population_health",
            ),
            node(
                func=rank_economic_damage,
                inputs=["harm_by_category", "params:reporting.top_n"],
                outputs="economic_damage_ranking",
                name="rank_economic_damage",
            ),
            node(
                func=plot_population_health,
                inputs="population_health_ranking",
                outputs="population_health_chart",
                name="plot_population_health",
            ),
            node(
                func=plot_economic_damage,
                inputs="economic_damage_ranking",
                outputs="economic_damage_chart",
                name="plot_economic_damage",
            ),
        ]
    )
