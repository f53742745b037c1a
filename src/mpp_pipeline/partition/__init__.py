"""Complementarity of prediction methods at label and gene family level."""

from mpp_pipeline.partition.families import (
    FamilyComplementarity,
    FamilyCounts,
    count_family_complementarity,
)
from mpp_pipeline.partition.labels import (
    COMBINATION_SEPARATOR,
    LabelBucket,
    LabelPartition,
    TwoMethodPartition,
    partition_labels,
    partition_two_methods,
)

__all__ = [
    "COMBINATION_SEPARATOR",
    "LabelBucket",
    "LabelPartition",
    "TwoMethodPartition",
    "partition_labels",
    "partition_two_methods",
    "FamilyComplementarity",
    "FamilyCounts",
    "count_family_complementarity",
]
