"""GEXF export of correlation networks for Gephi."""

from pathlib import Path

import networkx as nx
from networkx.readwrite.gexf import GEXFWriter
import structlog

from mpp_pipeline.network import CorrelationNetwork, Layer, NodeCategory

logger = structlog.get_logger(__name__)

NODE_COLORS = {
    NodeCategory.FIRST: {"r": 255, "g": 0, "b": 0, "a": 0.6},
    NodeCategory.SECOND: {"r": 0, "g": 0, "b": 255, "a": 0.6},
    NodeCategory.BOTH: {"r": 0, "g": 255, "b": 0, "a": 0.6},
    NodeCategory.UNTAGGED: {"r": 128, "g": 128, "b": 128, "a": 0.6},
}

EDGE_COLORS = {
    Layer.FIRST: {"r": 255, "g": 0, "b": 0, "a": 1.0},
    Layer.SECOND: {"r": 0, "g": 0, "b": 255, "a": 1.0},
    Layer.MERGED: {"r": 0, "g": 255, "b": 0, "a": 1.0},
}


def to_networkx(network: CorrelationNetwork) -> nx.Graph:
    """
    Build an undirected graph keyed by dense node ids.

    Nodes carry the family name as label and a category colour; edges carry
    their emission id, weight, source layer and layer colour.
    """
    graph = nx.Graph()
    for position, node in enumerate(network.nodes):
        category = network.categories[node]
        graph.add_node(
            position,
            label=node,
            category=category.value,
            viz={"color": dict(NODE_COLORS[category])},
        )

    for edge_id, layer, source, target, weight in network.iter_edges():
        graph.add_edge(
            source,
            target,
            id=str(edge_id),
            weight=weight,
            layer=layer.value,
            viz={"color": dict(EDGE_COLORS[layer])},
        )
    return graph


def write_gexf(network: CorrelationNetwork, path: Path) -> Path:
    """
    Write the network as a GEXF 1.2 document.

    networkx emits edges in adjacency order; the ``<edge>`` elements are put
    back in emission order (first layer, second layer, merged) before the
    document is written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    writer = GEXFWriter(version="1.2draft")
    writer.add_graph(to_networkx(network))
    edges = writer.graph_element.find("edges")
    if edges is not None:
        edges[:] = sorted(edges, key=lambda element: int(element.get("id")))
    with open(path, "wb") as f:
        writer.write(f)

    logger.info("write_gexf_complete", path=str(path), nodes=len(network.nodes), edges=network.edge_count)
    return path
