"""Raw → clean pipeline for the NOAA storm database.

This pipeline reads the raw bz2 CSV, drops every column the harm
analysis does not use, audits the damage exponent codes, and outputs a
cleaned, categorized table with damage in dollars.
"""

from kedro.pipeline import Pipeline, node, pipeline

from .nodes import audit_exponent_codes, clean_storm_events, select_storm_columns


def create_pipeline(**kwargs) -> Pipeline:  # noqa: ARG001
    """Create the data_processing pipeline.

    Node chain:
        raw CSV → select columns → audit exponent codes
                                 → clean events → clean parquet + skipped report
    """
    return pipeline(
        [
            node(
                func=select_storm_columns,
                inputs="raw_storm_data",
                outputs="storm_events_selected",
                name="select_storm_columns",
            ),
            node(
                func=audit_exponent_codes,
                inputs="storm_events_selected",
                outputs="exponent_code_audit",
                name="audit_exponent_codes",
            ),
            node(
                func=clean_storm_events,
                inputs=["storm_events_selected", "params:cleaning"],
                outputs=["storm_events_clean", "skipped_records"],
                name="clean_storm_events",
            ),
        ]
    )
