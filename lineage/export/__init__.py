"""
Export module for the lineage engine.

Hands a built graph to external tools: a {nodes, links} structure for
graph-drawing libraries and Mermaid diagram text.
"""

from lineage.export.diagram import DiagramRenderer, escape_label, mermaid_ids, render_diagram
from lineage.export.visualization import export_graph

__all__ = [
    "DiagramRenderer",
    "escape_label",
    "export_graph",
    "mermaid_ids",
    "render_diagram",
]
