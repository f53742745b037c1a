"""Statistics and legend text blocks accompanying each chart."""

from collections.abc import Sequence

from mpp_pipeline.auprc import GENERALITY_LEGEND
from mpp_pipeline.network import CorrelationNetwork
from mpp_pipeline.partition import FamilyComplementarity, LabelBucket, LabelPartition, TwoMethodPartition


def _share_line(name: str, count: int, pct: float) -> str:
    return f"{name}: {count} >> {pct}%"


def format_two_method_statistics(partition: TwoMethodPartition, colors: Sequence[str]) -> str:
    """
    Summarise the label buckets of a two-method comparison.

    Args:
        partition: Result of partition_two_methods
        colors: Colours of the first, overlap and second segments

    Returns:
        Text with the number of labels, per-bucket count and percentage, and
        the colour legend
    """
    sizes = partition.bucket_sizes()
    pcts = partition.bucket_percentages()

    lines = [
        f"# functions: {partition.total_labels}",
        "",
        _share_line(partition.first, sizes[LabelBucket.FIRST], pcts[LabelBucket.FIRST]),
        _share_line(partition.second, sizes[LabelBucket.SECOND], pcts[LabelBucket.SECOND]),
        _share_line(partition.overlap_name, sizes[LabelBucket.BOTH], pcts[LabelBucket.BOTH]),
        "",
        "LEGEND:",
        f"{colors[0]}: {partition.first}",
        f"{colors[1]}: {partition.first} and {partition.second} overlap",
        f"{colors[2]}: {partition.second}",
    ]
    return "\n".join(lines) + "\n"


def format_multi_method_statistics(partition: LabelPartition) -> str:
    """Number of labels predicted correctly by exactly k methods, for each k."""
    distribution = partition.method_count_distribution()
    pcts = partition.method_count_percentages()

    lines = [f"# functions: {partition.total_labels}", ""]
    lines.extend(_share_line(str(n), count, pcts[n]) for n, count in distribution.items())
    return "\n".join(lines) + "\n"


def format_family_statistics(result: FamilyComplementarity, colors: Sequence[str]) -> str:
    pcts = result.percentages()
    lines = [
        f"{result.families_with_predictions} gene families received {result.total} "
        "predictions assigned by:",
        "",
        _share_line(result.first, result.first_only_total, pcts["first_only"]),
        _share_line(result.second, result.second_only_total, pcts["second_only"]),
        _share_line(f"{result.first}+{result.second}", result.overlap_total, pcts["overlap"]),
        "",
        "LEGEND:",
        f"{colors[0]}: {result.first}",
        f"{colors[1]}: {result.second}",
    ]
    return "\n".join(lines) + "\n"


def format_network_statistics(
    network: CorrelationNetwork,
    first_label: int,
    second_label: int,
) -> str:
    """
    Describe node annotations and cross-layer connectivity of a network.

    Args:
        network: Composed network
        first_label: Function the first representation predicts better
        second_label: Function the second representation predicts better
    """
    stats = network.statistics()
    first, second = network.first_layer, network.second_layer

    lines = [
        f"{stats.nodes} gene families have similar profiles in {first} and/or {second}, "
        "and are included in the network, of which:",
        f"\t{stats.first_annotated} are annotated with GO:{first_label}, "
        f"which {first} predicted better than {second} ({first}-specific)",
        f"\t{stats.second_annotated} are annotated with GO:{second_label}, "
        f"which {second} predicted better than {first} ({second}-specific)",
        f"\t{stats.both_annotated} of the {stats.nodes} gene families are annotated with both functions",
        "",
        f"{stats.first_connected_in_first_layer} gene families annotated with the {first}-specific "
        f"function are connected in the {first} profiles-based similarity network",
        f"{stats.second_connected_in_first_layer} gene families annotated with the {second}-specific "
        f"function are connected in the {first} profiles-based similarity network",
        f"{stats.first_connected_in_second_layer} gene families annotated with the {first}-specific "
        f"function are connected in the {second} profiles-based similarity network",
        f"{stats.second_connected_in_second_layer} gene families annotated with the {second}-specific "
        f"function are connected in the {second} profiles-based similarity network",
        "",
        "LEGEND:",
        "Nodes - gene families annotated with a GO function predicted better by:",
        f"\tred: GO:{first_label} - {first}",
        f"\tblue: GO:{second_label} - {second}",
        f"\tgreen: both GOs - both {first} and {second}",
        "Edges - absolute Pearson correlation coefficients "
        f"> {network.threshold} between gene family profiles in:",
        f"\tred: {first}",
        f"\tblue: {second}",
        "\tgreen: both",
    ]
    return "\n".join(lines) + "\n"


def format_auprc_statistics(functions: int) -> str:
    lines = [
        f"{functions} learnable GO functions with at least one prediction",
        "",
        "LEGEND:",
        *GENERALITY_LEGEND,
    ]
    return "\n".join(lines) + "\n"
