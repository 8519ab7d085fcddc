"""Tests for the record projector."""

import pandas as pd
import pytest

from stormharm.errors import MalformedRecordError
from stormharm.projection import FIELD_MAP, RAW_COLUMNS, project, select_raw_columns


@pytest.fixture()
def raw_record():
    return {
        "STATE__": 1.0,
        "BGN_DATE": "4/18/1950 0:00:00",
        "EVTYPE": "TORNADO",
        "FATALITIES": 2.0,
        "INJURIES": 15.0,
        "PROPDMG": 25.0,
        "PROPDMGEXP": "K",
        "CROPDMG": 0.0,
        "CROPDMGEXP": "",
        "REMARKS": "",
    }


class TestProject:
    def test_keeps_only_seven_fields(self, raw_record):
        projected = project(raw_record)
        assert list(projected) == list(FIELD_MAP.values())

    def test_values_and_types(self, raw_record):
        projected = project(raw_record)
        assert projected["event.type"] == "TORNADO"
        assert projected["health.fatalities"] == 2
        assert isinstance(projected["health.fatalities"], int)
        assert projected["health.injuries"] == 15
        assert projected["economic.property.damage"] == 25.0
        assert projected["economic.property.damage.exponent"] == "K"
        assert projected["economic.crop.damage.exponent"] == ""

    def test_numeric_strings_parse(self, raw_record):
        raw_record.update(FATALITIES="3", PROPDMG=" 1.5 ")
        projected = project(raw_record)
        assert projected["health.fatalities"] == 3
        assert projected["economic.property.damage"] == 1.5

    def test_missing_text_becomes_blank(self, raw_record):
        raw_record.update(PROPDMGEXP=float("nan"), EVTYPE=None)
        projected = project(raw_record)
        assert projected["economic.property.damage.exponent"] == ""
        assert projected["event.type"] == ""

    def test_does_not_mutate_input(self, raw_record):
        before = dict(raw_record)
        project(raw_record)
        assert raw_record == before


# ── Malformed records ────────────────────────────────────────────
class TestMalformed:
    @pytest.mark.parametrize(
        "column, value, reason",
        [
            ("FATALITIES", "many", "is not a number"),
            ("INJURIES", -1, "is negative"),
            ("PROPDMG", float("nan"), "is missing"),
            ("CROPDMG", float("inf"), "is not finite"),
            ("FATALITIES", 1.5, "is not a whole number"),
            ("PROPDMG", None, "is not a number"),
        ],
    )
    def test_bad_numeric_raises(self, raw_record, column, value, reason):
        raw_record[column] = value
        with pytest.raises(MalformedRecordError) as excinfo:
            project(raw_record)
        assert excinfo.value.field == column
        assert excinfo.value.reason == reason
        assert excinfo.value.position is None

    def test_absent_column_raises(self, raw_record):
        del raw_record["CROPDMGEXP"]
        with pytest.raises(MalformedRecordError, match="CROPDMGEXP"):
            project(raw_record)

    def test_is_a_value_error(self, raw_record):
        raw_record["INJURIES"] = "x"
        with pytest.raises(ValueError):
            project(raw_record)


class TestSelectRawColumns:
    def test_drops_other_columns(self, raw_record):
        df = pd.DataFrame([raw_record])
        selected = select_raw_columns(df)
        assert list(selected.columns) == RAW_COLUMNS

    def test_missing_column_raises_key_error(self, raw_record):
        df = pd.DataFrame([raw_record]).drop(columns=["PROPDMG"])
        with pytest.raises(KeyError, match="PROPDMG"):
            select_raw_columns(df)
