"""Turn Pr score tables into predicted label sets."""

import polars as pl
import structlog

from mpp_pipeline.annotations.load import ScoreTable

logger = structlog.get_logger(__name__)


def threshold_predictions(table: ScoreTable, threshold: float) -> dict[int, set[int]]:
    """
    Extract the labels each gene family is predicted to have.

    A prediction is positive when its Pr score is >= threshold. Every gene
    family of the table gets an entry, possibly an empty set.

    Args:
        table: Loaded Pr scores of one method
        threshold: Pr threshold in [0, 1]

    Returns:
        Mapping of gene family id to predicted labels
    """
    passed = (
        table.scores.filter(pl.col("score") >= threshold)
        .group_by("item")
        .agg(pl.col("label"))
    )

    predictions: dict[int, set[int]] = {item: set() for item in table.items}
    for item, labels in passed.iter_rows():
        predictions[item] = set(labels)

    logger.debug(
        "threshold_predictions_complete",
        path=str(table.path),
        threshold=threshold,
        families_with_predictions=passed.height,
    )
    return predictions


def all_labels(known: dict[int, set[int]]) -> set[int]:
    """Union of the label sets of all gene families."""
    labels: set[int] = set()
    for family_labels in known.values():
        labels |= family_labels
    return labels
