"""
Lineage Analyzer

Stateful entry point that keeps the most recently built graph and answers
queries against it. Each build replaces the graph wholesale; queries never
modify it.

Usage:
    analyzer = LineageAnalyzer()
    analyzer.build_lineage_graph(records)
    paths = analyzer.trace_paths("raw_orders", "revenue_report")
    deps = analyzer.dependencies_of("clean_orders")
    print(analyzer.render_diagram(max_nodes=50))
"""

from collections.abc import Iterable
from typing import Any, Optional

from lineage.export import export_graph, render_diagram
from lineage.graph import LineageGraph, LineageGraphBuilder
from lineage.models import DataPath, DependencySet, LineageNode, LineageStats
from lineage.query import DependencyResolver, PathTracer, summarize_lineage


class GraphNotBuiltError(RuntimeError):
    """Raised when a query runs before any graph has been built."""

    def __init__(self) -> None:
        super().__init__("No lineage graph has been built; call build_lineage_graph() first")


class LineageAnalyzer:
    """
    Builds a lineage graph and answers questions about it.

    Attributes:
        graph: The most recently built LineageGraph

    Raises:
        GraphNotBuiltError: From any query made before build_lineage_graph()
    """

    def __init__(self) -> None:
        self._builder = LineageGraphBuilder()
        self._graph: Optional[LineageGraph] = None

    @property
    def graph(self) -> LineageGraph:
        if self._graph is None:
            raise GraphNotBuiltError()
        return self._graph

    @property
    def is_built(self) -> bool:
        return self._graph is not None

    def build_lineage_graph(self, records: Optional[Iterable[Any]]) -> LineageGraph:
        """
        Build a new graph from job records, replacing any previous one.

        Args:
            records: JobRecords or mappings in the job-record input shape

        Returns:
            The new LineageGraph
        """
        self._graph = self._builder.build(records)
        return self._graph

    def trace_paths(
        self,
        from_id: str,
        to_id: str,
        max_depth: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> list[DataPath]:
        return PathTracer(self.graph).trace(from_id, to_id, max_depth=max_depth, limit=limit)

    def dependencies_of(self, entity_id: str) -> Optional[DependencySet]:
        return DependencyResolver(self.graph).dependencies_of(entity_id)

    def jobs_using(self, entity_id: str) -> list[LineageNode]:
        return DependencyResolver(self.graph).jobs_using(entity_id)

    def export_graph(self) -> dict[str, list[dict[str, Any]]]:
        return export_graph(self.graph)

    def render_diagram(
        self,
        max_nodes: Optional[int] = None,
        highlight: Optional[str] = None,
    ) -> str:
        return render_diagram(self.graph, max_nodes=max_nodes, highlight=highlight)

    def neighborhood(self, node_id: str, max_depth: int) -> LineageGraph:
        """Subgraph within max_depth undirected hops of node_id."""
        return self.graph.neighborhood(node_id, max_depth)

    def summarize(self) -> LineageStats:
        return summarize_lineage(self.graph)
