"""
Visualization Export

Flattens a LineageGraph into the {nodes, links} shape that force-directed
graph drawing libraries consume. No layout, filtering or aggregation.
"""

from typing import Any

from lineage.graph.builder import LineageGraph


def export_graph(graph: LineageGraph) -> dict[str, list[dict[str, Any]]]:
    """
    Export a graph for external rendering.

    Args:
        graph: The lineage graph to flatten

    Returns:
        {"nodes": [{id, type, label}, ...], "links": [{source, target, kind}, ...]}
        in node and edge insertion order
    """
    return {
        "nodes": [node.to_dict() for node in graph.nodes.values()],
        "links": [
            {"source": edge.source, "target": edge.target, "kind": edge.kind.value}
            for edge in graph.edges
        ],
    }
