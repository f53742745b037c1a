"""Function-centric complementarity: which methods predict which GO functions.

Counts are collected per gene family and then summarised per label. Only
correct predictions (predicted and known for the same gene family) count.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

import structlog

from mpp_pipeline.stats import percentage

logger = structlog.get_logger(__name__)

Predictions = Mapping[int, set[int]]

# Joins method names into the name of their overlap column, e.g. "MPP-H+PP"
COMBINATION_SEPARATOR = "+"


class LabelBucket(str, Enum):
    """Label-level category of a two-method comparison."""

    FIRST = "first"
    BOTH = "both"
    SECOND = "second"


def _correct(predictions: Predictions, known: Predictions, item: int) -> set[int]:
    return predictions.get(item, set()) & known.get(item, set())


@dataclass
class LabelPartition:
    """Per-label counts of gene families correctly annotated by each method.

    Attributes:
        methods: Method names in input order
        counts: label -> method -> number of gene families for which the
            method predicted the label correctly. Labels nobody predicted
            correctly are absent.
    """

    methods: list[str]
    counts: dict[int, dict[str, int]] = field(default_factory=dict)

    def labels(self) -> list[int]:
        return sorted(self.counts)

    @property
    def total_labels(self) -> int:
        return len(self.counts)

    def category(self, label: int) -> frozenset[str]:
        """Methods that predicted the label correctly at least once."""
        return frozenset(m for m, n in self.counts[label].items() if n > 0)

    def categories(self) -> dict[frozenset[str], list[int]]:
        """Labels grouped by the exact subset of methods that predicted them."""
        grouped: dict[frozenset[str], list[int]] = {}
        for label in self.labels():
            grouped.setdefault(self.category(label), []).append(label)
        return grouped

    def method_count_distribution(self) -> dict[int, int]:
        """Number of labels per number of methods predicting them, ascending."""
        distribution: dict[int, int] = {}
        for label in self.counts:
            n_methods = len(self.category(label))
            distribution[n_methods] = distribution.get(n_methods, 0) + 1
        return dict(sorted(distribution.items()))

    def method_count_percentages(self) -> dict[int, float]:
        return {
            n: percentage(count, self.total_labels)
            for n, count in self.method_count_distribution().items()
        }


def partition_labels(
    predictions: Mapping[str, Predictions],
    known: Predictions,
) -> LabelPartition:
    """
    Count, per label and method, the gene families a method annotated correctly.

    Every gene family in the union of the methods' prediction domains is
    visited. A method without an entry for a family is treated as having
    predicted nothing for it.

    Args:
        predictions: method name -> gene family -> predicted labels
        known: gene family -> known labels

    Returns:
        LabelPartition over the labels correctly predicted at least once
    """
    methods = list(predictions)
    items: set[int] = set()
    for method_predictions in predictions.values():
        items.update(method_predictions)

    counts: dict[int, dict[str, int]] = {}
    for item in items:
        correct = {m: _correct(predictions[m], known, item) for m in methods}
        for label in set().union(*correct.values()):
            row = counts.setdefault(label, {m: 0 for m in methods})
            for method in methods:
                if label in correct[method]:
                    row[method] += 1

    partition = LabelPartition(methods=methods, counts=counts)
    logger.info(
        "partition_labels_complete",
        methods=methods,
        families=len(items),
        correctly_predicted_labels=partition.total_labels,
        distribution=partition.method_count_distribution(),
    )
    return partition


@dataclass
class TwoMethodPartition:
    """Two-method comparison at family level and at label level.

    ``counts`` holds, per label, the number of gene families where only the
    first method, both methods, or only the second method got the label
    right. ``buckets`` re-classifies each label from those counts: a label is
    first-only (second-only) when it was never predicted correctly by the
    other method for any family and never jointly; every other label is
    ``both``, including labels each method found via different families.
    """

    first: str
    second: str
    counts: dict[int, dict[LabelBucket, int]] = field(default_factory=dict)
    buckets: dict[int, LabelBucket] = field(default_factory=dict)

    @property
    def overlap_name(self) -> str:
        return f"{self.first}{COMBINATION_SEPARATOR}{self.second}"

    def column_names(self) -> list[str]:
        return [self.first, self.overlap_name, self.second]

    def labels(self) -> list[int]:
        return sorted(self.counts)

    def labels_in(self, bucket: LabelBucket) -> list[int]:
        return sorted(label for label, b in self.buckets.items() if b == bucket)

    @property
    def total_labels(self) -> int:
        return len(self.buckets)

    def bucket_sizes(self) -> dict[LabelBucket, int]:
        return {bucket: len(self.labels_in(bucket)) for bucket in LabelBucket}

    def bucket_percentages(self) -> dict[LabelBucket, float]:
        return {
            bucket: percentage(size, self.total_labels)
            for bucket, size in self.bucket_sizes().items()
        }


def _bucket_for(row: dict[LabelBucket, int]) -> LabelBucket:
    first = row[LabelBucket.FIRST] > 0
    second = row[LabelBucket.SECOND] > 0
    both = row[LabelBucket.BOTH] > 0
    if first and not second and not both:
        return LabelBucket.FIRST
    if second and not first and not both:
        return LabelBucket.SECOND
    return LabelBucket.BOTH


def partition_two_methods(
    first_name: str,
    first: Predictions,
    second_name: str,
    second: Predictions,
    known: Predictions,
) -> TwoMethodPartition:
    """
    Compare two methods on the labels they predict correctly.

    Stage one resolves exclusivity per gene family: for each correctly
    predicted label of a family, the first-only, both or second-only count
    of the label is incremented. Stage two buckets each label from its
    three counts (see TwoMethodPartition).

    Args:
        first_name: Name of the first method
        first: gene family -> labels predicted by the first method
        second_name: Name of the second method
        second: gene family -> labels predicted by the second method
        known: gene family -> known labels

    Returns:
        TwoMethodPartition with counts and label buckets
    """
    if first_name == second_name:
        raise ValueError(f"Methods must have distinct names, got {first_name!r} twice")

    counts: dict[int, dict[LabelBucket, int]] = {}
    items = set(first) | set(second)

    for item in items:
        first_correct = _correct(first, known, item)
        second_correct = _correct(second, known, item)
        for label in first_correct | second_correct:
            row = counts.setdefault(label, {b: 0 for b in LabelBucket})
            if label in first_correct and label in second_correct:
                row[LabelBucket.BOTH] += 1
            elif label in first_correct:
                row[LabelBucket.FIRST] += 1
            else:
                row[LabelBucket.SECOND] += 1

    buckets = {label: _bucket_for(row) for label, row in counts.items()}
    partition = TwoMethodPartition(
        first=first_name, second=second_name, counts=counts, buckets=buckets
    )

    logger.info(
        "partition_two_methods_complete",
        first=first_name,
        second=second_name,
        families=len(items),
        bucket_sizes={b.value: n for b, n in partition.bucket_sizes().items()},
    )
    return partition
