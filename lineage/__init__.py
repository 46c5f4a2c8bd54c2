"""
Lineage Engine

Core engine for building pipeline lineage graphs from job records and
answering structural questions over them: path tracing, upstream and
downstream dependencies, and export to visualization and diagram formats.
"""

from lineage.analyzer import GraphNotBuiltError, LineageAnalyzer
from lineage.graph import LineageGraph, build_lineage_graph
from lineage.models import EdgeKind, LineageEdge, LineageNode, NodeType

__all__ = [
    "EdgeKind",
    "GraphNotBuiltError",
    "LineageAnalyzer",
    "LineageEdge",
    "LineageGraph",
    "LineageNode",
    "NodeType",
    "build_lineage_graph",
]
__version__ = "0.1.0"
