"""Summary emission: tables, statistics text, GEXF and charts."""

from mpp_pipeline.output.gexf import EDGE_COLORS, NODE_COLORS, to_networkx, write_gexf
from mpp_pipeline.output.statistics import (
    format_auprc_statistics,
    format_family_statistics,
    format_multi_method_statistics,
    format_network_statistics,
    format_two_method_statistics,
)
from mpp_pipeline.output.visualizations import ChartKind, ChartRenderer, ChartSpec
from mpp_pipeline.output.writers import (
    label_list_filename,
    write_auprc_table,
    write_family_counts,
    write_label_counts,
    write_label_lists,
    write_run_summary,
    write_text,
)

__all__ = [
    "EDGE_COLORS",
    "NODE_COLORS",
    "to_networkx",
    "write_gexf",
    "format_auprc_statistics",
    "format_family_statistics",
    "format_multi_method_statistics",
    "format_network_statistics",
    "format_two_method_statistics",
    "ChartKind",
    "ChartRenderer",
    "ChartSpec",
    "label_list_filename",
    "write_auprc_table",
    "write_family_counts",
    "write_label_counts",
    "write_label_lists",
    "write_run_summary",
    "write_text",
]
