"""
Mermaid Diagram Rendering

Renders a LineageGraph as a Mermaid top-down flowchart:

    graph TD
        d1["Raw Orders"]:::entity
        j1("Clean Orders"):::job
        d1 --> j1
        j1 ==> d2

        classDef entity fill:#e1f5fe,stroke:#01579b,stroke-width:2px
        classDef job fill:#f3e5f5,stroke:#4a148c,stroke-width:2px

Design Decisions:
    - Entities use square brackets, jobs use round brackets
    - reads edges use "-->", writes edges use "==>"
    - Node declarations follow graph insertion order, so output is exact
      and testable for small fixtures
    - Node ids are used as Mermaid identifiers when they are plain words;
      ids with spaces, quotes or other punctuation, and Mermaid keywords
      such as "end", are drawn under a generated identifier (n<position>)
    - max_nodes is a hard cap on node declarations, not a sample; edges are
      emitted only between declared nodes. Callers wanting a representative
      picture should render LineageGraph.neighborhood() instead.
"""

import re
from collections.abc import Iterable
from typing import Optional

from lineage.graph.builder import LineageGraph
from lineage.models import EdgeKind, LineageNode, NodeType

INDENT = "    "

NODE_SHAPES = {
    NodeType.ENTITY: ('["', '"]'),
    NodeType.JOB: ('("', '")'),
}

CONNECTORS = {
    EdgeKind.READS: "-->",
    EdgeKind.WRITES: "==>",
}

CLASS_STYLES = {
    NodeType.ENTITY: "fill:#e1f5fe,stroke:#01579b,stroke-width:2px",
    NodeType.JOB: "fill:#f3e5f5,stroke:#4a148c,stroke-width:2px",
}

HIGHLIGHT_STYLES = {
    NodeType.ENTITY: "fill:#ffd54f,stroke:#f57c00,stroke-width:3px",
    NodeType.JOB: "fill:#ffcc80,stroke:#e65100,stroke-width:3px",
}

SAFE_ID = re.compile(r"[A-Za-z0-9_]+(?:-[A-Za-z0-9_]+)*")

# Compared lowercased
RESERVED_IDS = frozenset(
    {
        "end",
        "graph",
        "flowchart",
        "subgraph",
        "direction",
        "style",
        "linkstyle",
        "class",
        "classdef",
        "click",
        "call",
        "href",
    }
)


def escape_label(label: str) -> str:
    """Make a label safe inside a quoted Mermaid node label."""
    return " ".join(label.replace('"', "'").splitlines())


def mermaid_ids(node_ids: Iterable[str]) -> dict[str, str]:
    """
    Map node ids to identifiers Mermaid can parse.

    Plain ids are kept as they are. Any other id becomes n<position>, with
    underscores appended until it clashes with no other id.

    Args:
        node_ids: All node ids, in insertion order

    Returns:
        Dict of node id -> Mermaid identifier
    """
    node_ids = list(node_ids)
    taken = set(node_ids)
    mapping = {}
    for position, node_id in enumerate(node_ids):
        if SAFE_ID.fullmatch(node_id) and node_id.lower() not in RESERVED_IDS:
            mapping[node_id] = node_id
            continue
        candidate = f"n{position}"
        while candidate in taken:
            candidate += "_"
        taken.add(candidate)
        mapping[node_id] = candidate
    return mapping


def _class_name(node_type: NodeType, highlighted: bool = False) -> str:
    return f"{node_type.value}_highlight" if highlighted else node_type.value


class DiagramRenderer:
    """
    Renders lineage graphs as Mermaid diagrams.

    Usage:
        renderer = DiagramRenderer(graph)
        text = renderer.render(max_nodes=50)
    """

    def __init__(self, graph: LineageGraph) -> None:
        self._graph = graph

    def render(self, max_nodes: Optional[int] = None, highlight: Optional[str] = None) -> str:
        """
        Render the graph.

        Args:
            max_nodes: Maximum number of node declarations (None for all)
            highlight: ID of a node to emphasize with a highlight class

        Returns:
            Mermaid source, lines joined with newlines

        Raises:
            ValueError: If max_nodes is negative
        """
        if max_nodes is not None and max_nodes < 0:
            raise ValueError(f"max_nodes must be >= 0, got {max_nodes}")

        nodes = list(self._graph.nodes.values())
        if max_nodes is not None:
            nodes = nodes[:max_nodes]
        declared = {node.id for node in nodes}
        ids = mermaid_ids(self._graph.nodes)

        lines = ["graph TD"]
        lines.extend(self._node_line(node, ids[node.id], node.id == highlight) for node in nodes)

        for edge in self._graph.edges:
            if edge.source in declared and edge.target in declared:
                connector = CONNECTORS[edge.kind]
                lines.append(f"{INDENT}{ids[edge.source]} {connector} {ids[edge.target]}")

        lines.append("")
        for node_type, style in CLASS_STYLES.items():
            lines.append(f"{INDENT}classDef {_class_name(node_type)} {style}")
        if highlight is not None and highlight in declared:
            for node_type, style in HIGHLIGHT_STYLES.items():
                lines.append(f"{INDENT}classDef {_class_name(node_type, True)} {style}")

        return "\n".join(lines)

    def _node_line(self, node: LineageNode, mermaid_id: str, highlighted: bool) -> str:
        opening, closing = NODE_SHAPES[node.type]
        css_class = _class_name(node.type, highlighted)
        return f"{INDENT}{mermaid_id}{opening}{escape_label(node.label)}{closing}:::{css_class}"


def render_diagram(
    graph: LineageGraph,
    max_nodes: Optional[int] = None,
    highlight: Optional[str] = None,
) -> str:
    """Render a graph as a Mermaid diagram. See DiagramRenderer.render."""
    return DiagramRenderer(graph).render(max_nodes=max_nodes, highlight=highlight)
