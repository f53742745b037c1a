"""Annotation loading: known functions, Pr scores, GO subsets."""

from mpp_pipeline.annotations.ids import og_to_int, og_to_str
from mpp_pipeline.annotations.load import (
    PROKARYOTIC_SUBSET,
    ScoreTable,
    load_known_labels,
    load_label_allowlist,
    load_label_frequencies,
    load_prokaryotic_labels,
    load_score_table,
)
from mpp_pipeline.annotations.transform import all_labels, threshold_predictions

__all__ = [
    "og_to_int",
    "og_to_str",
    "PROKARYOTIC_SUBSET",
    "ScoreTable",
    "load_known_labels",
    "load_label_allowlist",
    "load_label_frequencies",
    "load_prokaryotic_labels",
    "load_score_table",
    "all_labels",
    "threshold_predictions",
]
