"""Tests for correlation layers and feature selection."""

import polars as pl
import pytest

from mpp_pipeline.errors import ExternalToolError, MalformedRecordError
from mpp_pipeline.network import (
    CorrelationTable,
    RandomForestSelector,
    compute_layer_correlations,
    load_correlation_table,
    load_profiles,
    profile_items,
    reduce_profiles,
    select_annotated_items,
    write_correlation_table,
)


@pytest.fixture
def profiles():
    return pl.DataFrame({
        "OG": ["COG0001", "COG0002", "COG0003", "NOG4"],
        "f1": [1.0, 2.0, 1.0, 5.0],
        "f2": [2.0, 4.0, 0.0, 5.0],
        "f3": [3.0, 6.0, -1.0, 5.0],
    })


def test_load_profiles_csv(tmp_path):
    path = tmp_path / "profiles.csv"
    path.write_text("OG,f1,f2\nCOG0001,1,0.5\nNOG7,0,1\n")

    df = load_profiles(path)

    assert df.columns == ["OG", "f1", "f2"]
    assert df.height == 2
    assert profile_items(df) == {"COG0001": 1, "NOG7": -7}


def test_load_profiles_tsv(tmp_path):
    path = tmp_path / "profiles.tsv"
    path.write_text("OG\tf1\nCOG0001\t1\n")

    assert load_profiles(path).height == 1


def test_load_profiles_non_numeric_feature(tmp_path):
    path = tmp_path / "profiles.csv"
    path.write_text("OG,f1\nCOG0001,abc\n")

    with pytest.raises(MalformedRecordError):
        load_profiles(path)


def test_load_profiles_duplicate_family(tmp_path):
    path = tmp_path / "profiles.csv"
    path.write_text("OG,f1\nCOG0001,1\nCOG0001,2\n")

    with pytest.raises(MalformedRecordError) as exc_info:
        load_profiles(path)

    assert exc_info.value.line_number == 3


def test_compute_layer_correlations(profiles):
    layer = compute_layer_correlations(profiles)

    # 4 families -> 6 unordered pairs
    assert len(layer) == 6
    assert all(a < b for a, b in layer)
    assert layer[("COG0001", "COG0002")] == 1.0
    # perfectly anti-correlated profile gives |r| = 1
    assert layer[("COG0001", "COG0003")] == 1.0


def test_constant_profile_correlation_is_zero(profiles):
    layer = compute_layer_correlations(profiles)

    assert layer[("COG0001", "NOG4")] == 0.0


def test_compute_layer_correlations_restricted(profiles):
    layer = compute_layer_correlations(profiles, items={"COG0001", "COG0003"})

    assert list(layer) == [("COG0001", "COG0003")]


def test_compute_layer_correlations_rounding():
    df = pl.DataFrame({
        "OG": ["COG0001", "COG0002"],
        "f1": [1.0, 1.0],
        "f2": [2.0, 3.0],
        "f3": [3.0, 2.0],
        "f4": [4.0, 5.0],
    })

    layer = compute_layer_correlations(df, precision=2)

    value = layer[("COG0001", "COG0002")]
    assert value == round(value, 2)
    assert 0.0 <= value <= 1.0


def test_correlation_table_round_trip_with_missing(tmp_path):
    table = CorrelationTable(
        first_name="MPP",
        second_name="PP",
        first={("COG0001", "COG0002"): 0.75, ("COG0001", "NOG3"): 0.1},
        second={("COG0001", "COG0002"): 0.5},
    )
    path = write_correlation_table(tmp_path / "corr.txt", table)

    lines = path.read_text().splitlines()
    assert lines[0] == "Gene family pair\tMPP\tPP"
    assert lines[1] == "COG0001-COG0002\t0.75\t0.5"
    assert lines[2] == "COG0001-NOG3\t0.1\tNA"

    loaded = load_correlation_table(path)
    assert loaded.first_name == "MPP"
    assert loaded.first == table.first
    assert loaded.second == table.second


def test_load_correlation_table_bad_weight(tmp_path):
    path = tmp_path / "corr.txt"
    path.write_text("Gene family pair\tMPP\tPP\nCOG0001-COG0002\t0.5\tx\n")

    with pytest.raises(MalformedRecordError) as exc_info:
        load_correlation_table(path)

    assert exc_info.value.line_number == 2


def test_load_correlation_table_missing_separator(tmp_path):
    path = tmp_path / "corr.txt"
    path.write_text("Gene family pair\tMPP\tPP\nCOG0001COG0002\t0.5\t0.5\n")

    with pytest.raises(MalformedRecordError):
        load_correlation_table(path)


def test_load_correlation_table_self_pair(tmp_path):
    path = tmp_path / "corr.txt"
    path.write_text("Gene family pair\tMPP\tPP\nCOG0001-COG0001\t0.5\t0.5\n")

    with pytest.raises(MalformedRecordError):
        load_correlation_table(path)



def test_load_correlation_table_duplicate_after_missing_weights(tmp_path):
    path = tmp_path / "corr.txt"
    path.write_text(
        "Gene family pair\tMPP\tPP\n"
        "COG0001-COG0002\tNA\tNA\n"
        "COG0002-COG0001\t0.5\t0.5\n"
    )

    with pytest.raises(MalformedRecordError) as exc_info:
        load_correlation_table(path)

    assert exc_info.value.line_number == 3
    assert "duplicate pair" in str(exc_info.value)


def test_load_correlation_table_weight_out_of_range(tmp_path):
    path = tmp_path / "corr.txt"
    path.write_text("Gene family pair\tMPP\tPP\nCOG0001-COG0002\t0.5\t0.5\nCOG0001-COG0003\t1.5\tNA\n")

    with pytest.raises(MalformedRecordError) as exc_info:
        load_correlation_table(path)

    assert exc_info.value.line_number == 3
    assert "outside [0, 1]" in str(exc_info.value)

def test_select_annotated_items():
    known = {1: {9401}, 2: {6094}, 3: {9401, 6094}, 4: {5}}

    first, second = select_annotated_items(known, 9401, 6094)

    assert first == {1, 3}
    assert second == {2, 3}


def test_random_forest_selector_keeps_informative_feature():
    n = 40
    target = [i % 2 == 0 for i in range(n)]
    features = pl.DataFrame({
        "signal": [1.0 if t else 0.0 for t in target],
        "constant": [0.5] * n,
    })

    selected = RandomForestSelector(n_estimators=20).select(features, target)

    assert selected == ["signal"]


def test_random_forest_selector_length_mismatch():
    features = pl.DataFrame({"f": [1.0, 2.0]})

    with pytest.raises(ValueError):
        RandomForestSelector().select(features, [True])


def test_random_forest_selector_failure_is_external_tool_error():
    features = pl.DataFrame({"f": [1.0, 2.0]})

    with pytest.raises(ExternalToolError) as exc_info:
        RandomForestSelector(n_estimators=5).select(features.head(0), [])

    assert exc_info.value.tool == "random forest feature selection"


class KeepFirstColumn:
    def select(self, features, target):
        return features.columns[:1]


def test_reduce_profiles_keeps_id_column(profiles):
    reduced = reduce_profiles(profiles, [True, False, True, False], KeepFirstColumn())

    assert reduced.columns == ["OG", "f1"]
    assert reduced.height == profiles.height
