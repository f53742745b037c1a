"""Tests for the gene family-centric complementarity counter."""

import pytest

from mpp_pipeline.partition import count_family_complementarity


def test_counts_per_family():
    known = {1: {10, 11, 12}, 2: {10}, 3: {13}}
    first = {1: {10, 11}, 2: {10}, 3: {99}}
    second = {1: {11, 12}, 2: set()}

    result = count_family_complementarity("MPP", first, "PP", second, known)

    rows = {row.item: row for row in result.rows}
    assert (rows[1].first_only, rows[1].overlap, rows[1].second_only) == (1, 1, 1)
    assert (rows[2].first_only, rows[2].overlap, rows[2].second_only) == (1, 0, 0)
    assert rows[3].total == 0


def test_row_invariants():
    known = {1: {10, 11, 12, 13}, 2: {10, 14}}
    first = {1: {10, 11, 15}, 2: {14}}
    second = {1: {11, 12}, 2: {10, 14}}

    result = count_family_complementarity("a", first, "b", second, known)

    for row in result.rows:
        first_correct = first.get(row.item, set()) & known.get(row.item, set())
        second_correct = second.get(row.item, set()) & known.get(row.item, set())
        assert row.total == len(first_correct | second_correct)
        assert row.overlap == len(first_correct & second_correct)


def test_reported_rows_exclude_zero_totals_and_are_sorted():
    known = {-5: {1}, 3: {1}, 7: {2}}
    first = {7: {2}, -5: {1}, 3: {9}}
    second = {}

    result = count_family_complementarity("a", first, "b", second, known)

    assert [row.item for row in result.reported_rows()] == [-5, 7]
    assert result.families_with_predictions == 2


def test_totals_and_percentages():
    known = {1: {10, 11}, 2: {10, 11}}
    first = {1: {10, 11}, 2: {10}}
    second = {1: {10}, 2: {11}}

    result = count_family_complementarity("a", first, "b", second, known)

    assert result.first_only_total == 2
    assert result.overlap_total == 1
    assert result.second_only_total == 1
    assert result.total == 4
    assert result.percentages() == {"first_only": 50.0, "overlap": 25.0, "second_only": 25.0}


def test_zero_total_reports_zero_percentages():
    result = count_family_complementarity("a", {1: {5}}, "b", {1: {6}}, {1: {7}})

    assert result.total == 0
    assert result.percentages() == {"first_only": 0.0, "overlap": 0.0, "second_only": 0.0}


def test_allowlist_restricts_labels():
    known = {1: {10, 11}}
    first = {1: {10, 11}}
    second = {1: {11}}

    result = count_family_complementarity("a", first, "b", second, known, allowed_labels={10})

    row = result.rows[0]
    assert (row.first_only, row.overlap, row.second_only) == (1, 0, 0)


def test_empty_allowlist_counts_nothing():
    known = {1: {10}}
    result = count_family_complementarity("a", {1: {10}}, "b", {1: {10}}, known, allowed_labels=set())

    assert result.total == 0
    assert result.reported_rows() == []


def test_same_method_name_rejected():
    with pytest.raises(ValueError, match="distinct names"):
        count_family_complementarity("PP", {1: {5}}, "PP", {1: {6}}, {1: {5, 6}})
