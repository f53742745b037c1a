"""Correlation layers, feature selection and network composition."""

from mpp_pipeline.network.composer import (
    ConnectivityStatistics,
    CorrelationNetwork,
    categorize_nodes,
    compose_network,
)
from mpp_pipeline.network.correlation import (
    CorrelationTable,
    compute_layer_correlations,
    load_correlation_table,
    load_profiles,
    profile_items,
    write_correlation_table,
)
from mpp_pipeline.network.features import (
    FeatureSelector,
    RandomForestSelector,
    reduce_profiles,
    select_annotated_items,
)
from mpp_pipeline.network.models import Layer, NodeCategory, Pair, canonical_pair

__all__ = [
    "ConnectivityStatistics",
    "CorrelationNetwork",
    "categorize_nodes",
    "compose_network",
    "CorrelationTable",
    "compute_layer_correlations",
    "load_correlation_table",
    "load_profiles",
    "profile_items",
    "write_correlation_table",
    "FeatureSelector",
    "RandomForestSelector",
    "reduce_profiles",
    "select_annotated_items",
    "Layer",
    "NodeCategory",
    "Pair",
    "canonical_pair",
]
