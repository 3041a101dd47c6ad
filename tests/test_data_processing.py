import logging

import numpy as np
import pandas as pd
import pytest

from maize.data_processing import (
    DataQualityReport,
    check_data_quality,
    clean_names,
    load_observations,
    summarise_table,
)
from maize.errors import InvalidInputError, LoadError


def test_clean_names_normalises_case_and_separators():
    assert clean_names(["Plant Height", "plantHeight", " PLANT-height "]) == [
        "plant_height",
        "plant_height_2",
        "plant_height_3",
    ]
    assert clean_names(["Pair", "TYPE", "", "height"]) == ["pair", "type", "x", "height"]


def test_load_darwin_table_shape_and_types(darwin):
    assert list(darwin.columns) == ["pair", "type", "height"]
    assert len(darwin) == 30
    assert set(darwin["type"]) == {"Cross", "Self"}
    assert darwin["height"].dtype == float
    assert pd.api.types.is_integer_dtype(darwin["pair"])
    assert sorted(darwin["pair"].unique()) == list(range(1, 16))


def test_load_normalises_headers(write_csv):
    path = write_csv("Pair,TYPE,Height\n1,Cross,20.5\n1,Self,18\n")
    table = load_observations(path)
    assert list(table.columns) == ["pair", "type", "height"]
    assert table["height"].tolist() == [20.5, 18.0]


def test_load_requires_height_column(write_csv):
    path = write_csv("Pair,Type,Plant Height\n1,Cross,20.5\n1,Self,18\n")
    with pytest.raises(LoadError, match="missing required columns"):
        load_observations(path)


def test_load_strips_type_labels(write_csv):
    path = write_csv("pair,type,height\n1, Cross ,20.5\n1,Self  ,18\n")
    table = load_observations(path)
    assert table["type"].tolist() == ["Cross", "Self"]


def test_load_missing_file_raises_load_error(tmp_path):
    missing = tmp_path / "nope.csv"
    with pytest.raises(LoadError, match="nope.csv") as excinfo:
        load_observations(missing)
    assert excinfo.value.path == str(missing)
    assert not isinstance(excinfo.value, ValueError)


def test_load_empty_file_raises_load_error(write_csv):
    path = write_csv("")
    with pytest.raises(LoadError):
        load_observations(path)


def test_load_unknown_type_label_raises(write_csv):
    path = write_csv("pair,type,height\n1,Cross,20\n1,Hybrid,19\n")
    with pytest.raises(LoadError, match="Hybrid"):
        load_observations(path)


def test_non_numeric_height_becomes_missing_and_is_logged(write_csv, caplog):
    path = write_csv("pair,type,height\n1,Cross,20\n1,Self,tall\n")
    with caplog.at_level(logging.WARNING, logger="maize.data_processing"):
        table = load_observations(path)
    assert np.isnan(table.loc[1, "height"])
    assert "non-numeric" in caplog.text


def test_quality_report_for_darwin(darwin):
    report = check_data_quality(darwin)
    assert isinstance(report, DataQualityReport)
    assert report.n_rows == 30
    assert report.duplicate_rows == 0
    assert report.missing_values == 0
    assert report.height_min == 12.0
    assert report.height_max == 23.5
    assert report.out_of_range == ()
    assert report.pair_ids == tuple(range(1, 16))
    assert report.type_levels == ("Cross", "Self")
    assert not report.has_issues


def test_quality_report_counts_duplicates_missing_and_out_of_range(caplog):
    table = pd.DataFrame(
        {
            "pair": [1, 1, 1, 2, 2],
            "type": ["Cross", "Self", "Self", "Cross", "Self"],
            "height": [20.0, 18.0, 18.0, 95.0, np.nan],
        }
    )
    with caplog.at_level(logging.WARNING):
        report = check_data_quality(table, height_bounds=(5.0, 40.0))
    assert report.duplicate_rows == 1
    assert report.missing_values == 1
    assert report.out_of_range == (3,)
    assert report.height_max == 95.0
    assert report.has_issues
    assert "duplicated" in caplog.text
    assert "outside plausible range" in caplog.text
    # reported, never removed
    assert len(table) == 5


def test_quality_report_keeps_string_row_labels(caplog):
    table = pd.DataFrame(
        {
            "pair": [1, 1, 2],
            "type": ["Cross", "Self", "Cross"],
            "height": [20.0, 95.0, 19.0],
        },
        index=["a", "b", "c"],
    )
    with caplog.at_level(logging.WARNING):
        report = check_data_quality(table, height_bounds=(5.0, 40.0))
    assert report.out_of_range == ("b",)
    assert "Row b has" in caplog.text


def test_quality_report_rejects_unordered_bounds(darwin):
    with pytest.raises(InvalidInputError, match="height_bounds"):
        check_data_quality(darwin, height_bounds=(30.0, 10.0))


def test_summarise_table_covers_every_column(darwin):
    summary = summarise_table(darwin)
    assert set(summary.columns) == {"pair", "type", "height"}
    assert summary.loc["count", "height"] == 30
