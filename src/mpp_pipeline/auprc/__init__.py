"""AUPRC distribution by GO function generality."""

from mpp_pipeline.auprc.distribution import (
    GENERALITY_LEGEND,
    GENERALITY_LEVELS,
    AuprcStatistics,
    build_auprc_table,
    categorize_generality,
    information_content,
    learnable_labels,
    load_auprc_statistics,
)

__all__ = [
    "GENERALITY_LEGEND",
    "GENERALITY_LEVELS",
    "AuprcStatistics",
    "build_auprc_table",
    "categorize_generality",
    "information_content",
    "learnable_labels",
    "load_auprc_statistics",
]
