"""Feature selection for correlation profiles.

Features are kept when they help a classifier tell apart gene families
annotated with a given function from the rest.
"""

from collections.abc import Mapping, Sequence
from typing import Protocol

import numpy as np
import polars as pl
import structlog
from sklearn.ensemble import RandomForestClassifier
from sklearn.inspection import permutation_importance

from mpp_pipeline.errors import ExternalToolError

logger = structlog.get_logger(__name__)


class FeatureSelector(Protocol):
    """Anything that picks feature columns from labelled profiles."""

    def select(self, features: pl.DataFrame, target: Sequence[bool]) -> list[str]:
        """Return the retained feature column names, in column order."""
        ...


class RandomForestSelector:
    """Keep features with positive permutation importance in a random forest.

    Args:
        n_estimators: Trees in the forest
        random_state: Seed for the forest and the permutations
        n_repeats: Permutations per feature
    """

    tool = "random forest feature selection"

    def __init__(self, n_estimators: int = 200, random_state: int = 1, n_repeats: int = 5):
        self.n_estimators = n_estimators
        self.random_state = random_state
        self.n_repeats = n_repeats

    def select(self, features: pl.DataFrame, target: Sequence[bool]) -> list[str]:
        if features.height != len(target):
            raise ValueError(
                f"{features.height} profiles but {len(target)} target values"
            )

        X = features.to_numpy().astype(float)
        y = np.asarray(target, dtype=int)

        try:
            model = RandomForestClassifier(
                n_estimators=self.n_estimators, random_state=self.random_state
            ).fit(X, y)
            result = permutation_importance(
                model, X, y, n_repeats=self.n_repeats, random_state=self.random_state
            )
        except ValueError as e:
            raise ExternalToolError(self.tool, str(e)) from e

        selected = [
            column
            for column, importance in zip(features.columns, result.importances_mean)
            if importance > 0
        ]
        logger.info(
            "feature_selection_complete",
            features=features.width,
            selected=len(selected),
            positives=int(y.sum()),
        )
        return selected


def select_annotated_items(
    known: Mapping[int, set[int]],
    first_label: int,
    second_label: int,
) -> tuple[set[int], set[int]]:
    """
    Gene families annotated with either characteristic function.

    Returns:
        (families with first_label, families with second_label); a family
        carrying both appears in both sets
    """
    first = {item for item, labels in known.items() if first_label in labels}
    second = {item for item, labels in known.items() if second_label in labels}
    return first, second


def reduce_profiles(
    profiles: pl.DataFrame,
    target: Sequence[bool],
    selector: FeatureSelector,
) -> pl.DataFrame:
    """Keep the id column and the features the selector retains."""
    id_column = profiles.columns[0]
    features = profiles.drop(id_column)
    selected = selector.select(features, target)
    return profiles.select([id_column, *selected])
