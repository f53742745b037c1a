"""Compose two correlation layers into one annotated similarity network.

Edges above the threshold in both layers are merged into a single edge with
the mean weight. Nodes are the endpoints of retained edges only.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

import structlog

from mpp_pipeline.errors import ReferentialIntegrityError
from mpp_pipeline.network.models import Layer, NodeCategory, Pair, canonical_pair
from mpp_pipeline.stats import round_half_up

logger = structlog.get_logger(__name__)

# Emission order of edge layers
LAYER_ORDER = (Layer.FIRST, Layer.SECOND, Layer.MERGED)


def categorize_nodes(
    first_members: set[str],
    second_members: set[str],
) -> dict[str, NodeCategory]:
    """
    Tag gene families by the characteristic function they are annotated with.

    Args:
        first_members: Families annotated with the function the first
            representation predicts better
        second_members: Families annotated with the function the second
            representation predicts better

    Returns:
        Mapping of family to FIRST, SECOND or BOTH
    """
    categories: dict[str, NodeCategory] = {}
    for node in first_members | second_members:
        if node in first_members and node in second_members:
            categories[node] = NodeCategory.BOTH
        elif node in first_members:
            categories[node] = NodeCategory.FIRST
        else:
            categories[node] = NodeCategory.SECOND
    return categories


@dataclass(frozen=True)
class ConnectivityStatistics:
    """How the annotated families connect in each layer.

    A family annotated with both functions counts as first- and as
    second-annotated. A merged edge connects its ends in both layers.
    """

    nodes: int
    first_annotated: int
    second_annotated: int
    both_annotated: int
    first_connected_in_first_layer: int
    second_connected_in_first_layer: int
    first_connected_in_second_layer: int
    second_connected_in_second_layer: int


@dataclass
class CorrelationNetwork:
    """Similarity network of gene families from two representations.

    Attributes:
        first_layer: Name of the first representation
        second_layer: Name of the second representation
        threshold: Edges have weight strictly above this value
        nodes: Connected families, sorted; list position is the node id
        categories: Category of every node
        edges: Per layer, pair -> weight
    """

    first_layer: str
    second_layer: str
    threshold: float
    nodes: list[str]
    categories: dict[str, NodeCategory]
    edges: dict[Layer, dict[Pair, float]] = field(default_factory=dict)

    def __post_init__(self):
        self.positions = {node: i for i, node in enumerate(self.nodes)}

    @property
    def edge_count(self) -> int:
        return sum(len(layer_edges) for layer_edges in self.edges.values())

    def iter_edges(self) -> Iterator[tuple[int, Layer, int, int, float]]:
        """Yield (edge id, layer, source id, target id, weight) in emission order.

        First-layer edges come first, then second-layer edges, then merged
        edges; within a layer pairs are ascending.
        """
        edge_id = 0
        for layer in LAYER_ORDER:
            for pair in sorted(self.edges.get(layer, {})):
                a, b = pair
                yield edge_id, layer, self.positions[a], self.positions[b], self.edges[layer][pair]
                edge_id += 1

    def connected_nodes(self, layer: Layer) -> set[str]:
        """Nodes with an edge in the given representation, merged edges included."""
        connected: set[str] = set()
        sources = [layer] if layer == Layer.MERGED else [layer, Layer.MERGED]
        for source in sources:
            for a, b in self.edges.get(source, {}):
                connected.add(a)
                connected.add(b)
        return connected

    def annotated_with(self, category: NodeCategory) -> set[str]:
        """Nodes carrying the category's function, BOTH nodes included."""
        return {
            node for node, c in self.categories.items()
            if c == category or c == NodeCategory.BOTH
        }

    def statistics(self) -> ConnectivityStatistics:
        first_annotated = self.annotated_with(NodeCategory.FIRST)
        second_annotated = self.annotated_with(NodeCategory.SECOND)
        in_first = self.connected_nodes(Layer.FIRST)
        in_second = self.connected_nodes(Layer.SECOND)

        return ConnectivityStatistics(
            nodes=len(self.nodes),
            first_annotated=len(first_annotated),
            second_annotated=len(second_annotated),
            both_annotated=sum(1 for c in self.categories.values() if c == NodeCategory.BOTH),
            first_connected_in_first_layer=len(first_annotated & in_first),
            second_connected_in_first_layer=len(second_annotated & in_first),
            first_connected_in_second_layer=len(first_annotated & in_second),
            second_connected_in_second_layer=len(second_annotated & in_second),
        )


def _filter_layer(layer: Mapping[Pair, float], threshold: float) -> dict[Pair, float]:
    kept: dict[Pair, float] = {}
    for (a, b), weight in layer.items():
        if weight > threshold:
            pair = canonical_pair(a, b)
            if pair in kept and kept[pair] != weight:
                raise ValueError(f"Conflicting weights for pair {pair}: {kept[pair]} and {weight}")
            kept[pair] = weight
    return kept


def compose_network(
    first_layer: Mapping[Pair, float],
    second_layer: Mapping[Pair, float],
    categories: Mapping[str, NodeCategory],
    threshold: float,
    precision: int = 4,
    first_name: str = "first",
    second_name: str = "second",
) -> CorrelationNetwork:
    """
    Merge two correlation layers over the same families into one network.

    Steps:
    1. Keep edges with weight > threshold in each layer
    2. Move pairs present in both layers to the merged layer with weight
       round(mean(w_first, w_second), precision)
    3. Nodes = endpoints of all retained edges
    4. Attach the externally computed category of each node

    Args:
        first_layer: pair -> weight from the first representation
        second_layer: pair -> weight from the second representation
        categories: Category of every family that may appear as a node
        threshold: Strict lower bound on edge weights
        precision: Decimal places of merged weights
        first_name: Name of the first representation
        second_name: Name of the second representation

    Returns:
        CorrelationNetwork

    Raises:
        ReferentialIntegrityError: If a node has no category
        ValueError: On self pairs or conflicting duplicate pairs
    """
    first = _filter_layer(first_layer, threshold)
    second = _filter_layer(second_layer, threshold)

    merged: dict[Pair, float] = {}
    for pair in set(first) & set(second):
        merged[pair] = round_half_up((first.pop(pair) + second.pop(pair)) / 2, precision)

    edges = {Layer.FIRST: first, Layer.SECOND: second, Layer.MERGED: merged}

    nodes: set[str] = set()
    for layer_edges in edges.values():
        for a, b in layer_edges:
            nodes.add(a)
            nodes.add(b)

    node_categories: dict[str, NodeCategory] = {}
    for node in sorted(nodes):
        if node not in categories:
            raise ReferentialIntegrityError(node, "node annotations", "correlation table")
        node_categories[node] = categories[node]

    network = CorrelationNetwork(
        first_layer=first_name,
        second_layer=second_name,
        threshold=threshold,
        nodes=sorted(nodes),
        categories=node_categories,
        edges=edges,
    )

    logger.info(
        "compose_network_complete",
        threshold=threshold,
        nodes=len(network.nodes),
        first_edges=len(first),
        second_edges=len(second),
        merged_edges=len(merged),
    )
    return network
