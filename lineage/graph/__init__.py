"""
Graph module for the lineage engine.

This module provides NetworkX-based graph construction for representing
which pipeline jobs read and write which data entities.
"""

from lineage.graph.builder import (
    LineageGraph,
    LineageGraphBuilder,
    build_lineage_graph,
)

__all__ = [
    "LineageGraph",
    "LineageGraphBuilder",
    "build_lineage_graph",
]
