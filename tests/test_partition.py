"""Tests for the function-centric partition of correct predictions."""

import pytest

from mpp_pipeline.partition import (
    LabelBucket,
    partition_labels,
    partition_two_methods,
)
from mpp_pipeline.output import write_label_counts

A, B, C = 1, 2, 3


@pytest.fixture
def example():
    """Three families, two methods, three labels."""
    known = {A: {1, 2}, B: {1}, C: {2, 3}}
    first = {A: {1}, B: {1}, C: {3}}
    second = {A: {2}, B: {1}, C: {3}}
    return known, first, second


def test_two_method_example_counts(example):
    known, first, second = example

    partition = partition_two_methods("m1", first, "m2", second, known)

    assert partition.counts[1] == {LabelBucket.FIRST: 1, LabelBucket.BOTH: 1, LabelBucket.SECOND: 0}
    assert partition.counts[2] == {LabelBucket.FIRST: 0, LabelBucket.BOTH: 0, LabelBucket.SECOND: 1}
    assert partition.counts[3] == {LabelBucket.FIRST: 0, LabelBucket.BOTH: 1, LabelBucket.SECOND: 0}


def test_two_method_example_buckets(example):
    known, first, second = example

    partition = partition_two_methods("m1", first, "m2", second, known)

    assert partition.buckets == {1: LabelBucket.BOTH, 2: LabelBucket.SECOND, 3: LabelBucket.BOTH}
    assert partition.bucket_sizes() == {
        LabelBucket.FIRST: 0,
        LabelBucket.BOTH: 2,
        LabelBucket.SECOND: 1,
    }


def test_label_found_by_each_method_via_different_families_is_both():
    known = {A: {1}, B: {1}}
    first = {A: {1}}
    second = {B: {1}}

    partition = partition_two_methods("m1", first, "m2", second, known)

    assert partition.counts[1][LabelBucket.FIRST] == 1
    assert partition.counts[1][LabelBucket.SECOND] == 1
    assert partition.buckets[1] == LabelBucket.BOTH


def test_buckets_exclusive_and_exhaustive(example):
    known, first, second = example

    partition = partition_two_methods("m1", first, "m2", second, known)

    seen = []
    for bucket in LabelBucket:
        seen.extend(partition.labels_in(bucket))
    assert sorted(seen) == partition.labels()
    assert len(seen) == len(set(seen))
    assert sum(partition.bucket_sizes().values()) == partition.total_labels


def test_incorrect_predictions_ignored():
    known = {A: {1}}
    first = {A: {1, 9}}
    second = {A: {8}}

    partition = partition_two_methods("m1", first, "m2", second, known)

    assert partition.labels() == [1]
    assert partition.buckets[1] == LabelBucket.FIRST


def test_family_in_one_domain_only():
    known = {A: {1}, B: {2}}
    first = {A: {1}}
    second = {B: {2}}

    partition = partition_two_methods("m1", first, "m2", second, known)

    assert partition.buckets == {1: LabelBucket.FIRST, 2: LabelBucket.SECOND}


def test_empty_inputs_give_zero_percentages():
    partition = partition_two_methods("m1", {}, "m2", {}, {})

    assert partition.total_labels == 0
    assert all(pct == 0.0 for pct in partition.bucket_percentages().values())


def test_bucket_percentages_rounded(example):
    known, first, second = example

    partition = partition_two_methods("m1", first, "m2", second, known)

    assert partition.bucket_percentages() == {
        LabelBucket.FIRST: 0.0,
        LabelBucket.BOTH: 66.67,
        LabelBucket.SECOND: 33.33,
    }


def test_same_method_names_rejected():
    with pytest.raises(ValueError):
        partition_two_methods("m", {}, "m", {}, {})


def test_column_names():
    partition = partition_two_methods("MPP-H", {}, "PP", {}, {})

    assert partition.column_names() == ["MPP-H", "MPP-H+PP", "PP"]


def test_multi_method_counts(example):
    known, first, second = example

    partition = partition_labels({"m1": first, "m2": second}, known)

    assert partition.counts == {
        1: {"m1": 2, "m2": 1},
        2: {"m1": 0, "m2": 1},
        3: {"m1": 1, "m2": 1},
    }
    assert partition.category(2) == frozenset({"m2"})
    assert partition.method_count_distribution() == {1: 1, 2: 2}


def test_multi_method_three_methods():
    known = {A: {1, 2, 3}}
    predictions = {
        "m1": {A: {1, 2, 3}},
        "m2": {A: {2, 3}},
        "m3": {A: {3}},
    }

    partition = partition_labels(predictions, known)

    assert partition.method_count_distribution() == {1: 1, 2: 1, 3: 1}
    assert partition.method_count_percentages() == {1: 33.33, 2: 33.33, 3: 33.33}
    assert partition.categories() == {
        frozenset({"m1"}): [1],
        frozenset({"m1", "m2"}): [2],
        frozenset({"m1", "m2", "m3"}): [3],
    }


def test_multi_method_drops_never_correct_labels():
    known = {A: {1}}
    partition = partition_labels({"m1": {A: {1, 2}}, "m2": {A: {3}}}, known)

    assert partition.labels() == [1]


def test_partition_idempotent_tables(example, tmp_path):
    """Running twice on identical inputs gives byte-identical tables."""
    known, first, second = example

    path1 = write_label_counts(partition_two_methods("m1", first, "m2", second, known), tmp_path / "a.txt")
    path2 = write_label_counts(partition_two_methods("m1", first, "m2", second, known), tmp_path / "b.txt")

    assert path1.read_bytes() == path2.read_bytes()


def test_partition_order_insensitive(example):
    known, first, second = example
    reversed_first = dict(reversed(list(first.items())))

    p1 = partition_two_methods("m1", first, "m2", second, known)
    p2 = partition_two_methods("m1", reversed_first, "m2", second, known)

    assert p1.counts == p2.counts
    assert p1.buckets == p2.buckets
