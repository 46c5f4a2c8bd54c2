"""
Graph Builder for the lineage engine

This module constructs and manages a NetworkX-based lineage graph where
nodes represent pipeline jobs and data entities, and edges represent the
entities a job reads and writes.

Design Decisions:
    - Uses NetworkX MultiDiGraph so repeated references keep one edge each
    - Stores LineageNode objects as node attributes
    - Keeps a separate edge sequence in insertion order for deterministic output
    - The finished graph is frozen (nx.freeze); rebuilding creates a new object

Graph Properties:
    - Directed: entity -> job for reads, job -> entity for writes
    - May have cycles (a job may feed itself through other jobs)
    - Never has dangling edges: every referenced id is materialized as a node
    - Node ids are the identifiers supplied by the job records

Label Policy:
    The first record to introduce an id fixes its type, label and metadata.
    Job records are applied before any input/output reference, so an id that
    names a job is always a job node even if another record references it as
    an entity first.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any, Optional

import networkx as nx

from lineage.models import EdgeKind, EntityRef, JobRecord, LineageEdge, LineageNode, NodeType
from lineage.records import normalize_records

logger = logging.getLogger(__name__)

NODE_ATTR = "lineage_node"
KIND_ATTR = "kind"


class LineageGraph:
    """
    An immutable lineage graph.

    Wraps a frozen NetworkX MultiDiGraph to provide a clean interface for:
    - Looking up job and entity nodes
    - Walking reads/writes edges in either direction
    - Taking subgraphs for focused rendering

    Instances are produced by LineageGraphBuilder and never mutated
    afterwards, so they can be shared between readers freely.

    Attributes:
        graph: The underlying frozen NetworkX MultiDiGraph
        nodes: Read-only mapping of node id to LineageNode
        edges: All edges in insertion order
        skipped_records: Number of malformed input records dropped during the build

    Usage:
        graph = build_lineage_graph(records)
        for node_id in graph.successors("raw_orders"):
            print(graph.get_node(node_id).label)
    """

    def __init__(
        self,
        graph: nx.MultiDiGraph,
        edges: Iterable[LineageEdge],
        skipped_records: int = 0,
    ) -> None:
        self._graph: nx.MultiDiGraph = nx.freeze(graph)
        self._edges: tuple[LineageEdge, ...] = tuple(edges)
        self._nodes: Mapping[str, LineageNode] = MappingProxyType(
            {node_id: data[NODE_ATTR] for node_id, data in graph.nodes(data=True)}
        )
        self.skipped_records = skipped_records

    @classmethod
    def from_parts(
        cls,
        nodes: Iterable[LineageNode],
        edges: Iterable[LineageEdge],
        skipped_records: int = 0,
    ) -> "LineageGraph":
        """
        Assemble a graph from already-built nodes and edges.

        Every edge endpoint must be among the given nodes.

        Raises:
            ValueError: If an edge references an unknown node id
        """
        graph = nx.MultiDiGraph()
        for node in nodes:
            graph.add_node(node.id, **{NODE_ATTR: node})

        edges = list(edges)
        for edge in edges:
            if edge.source not in graph or edge.target not in graph:
                raise ValueError(
                    f"Edge {edge.source!r} -> {edge.target!r} references a node not in the graph"
                )
            graph.add_edge(edge.source, edge.target, **{KIND_ATTR: edge.kind})

        return cls(graph, edges, skipped_records=skipped_records)

    @classmethod
    def empty(cls) -> "LineageGraph":
        return cls(nx.MultiDiGraph(), ())

    @property
    def graph(self) -> nx.MultiDiGraph:
        """Access the underlying (frozen) NetworkX graph."""
        return self._graph

    @property
    def nodes(self) -> Mapping[str, LineageNode]:
        return self._nodes

    @property
    def edges(self) -> tuple[LineageEdge, ...]:
        return self._edges

    @property
    def node_count(self) -> int:
        """Return the number of nodes in the graph."""
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        """Return the number of edges in the graph, parallel edges included."""
        return len(self._edges)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return self.node_count

    def __repr__(self) -> str:
        return f"<LineageGraph nodes={self.node_count} edges={self.edge_count}>"

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def get_node(self, node_id: str) -> Optional[LineageNode]:
        """
        Retrieve a LineageNode by its ID.

        Args:
            node_id: The unique identifier of the node

        Returns:
            The LineageNode if found, None otherwise
        """
        return self._nodes.get(node_id)

    def get_nodes_by_type(self, node_type: NodeType) -> Iterator[LineageNode]:
        """
        Get all nodes of one type, in insertion order.

        Args:
            node_type: JOB or ENTITY

        Yields:
            Each LineageNode of that type
        """
        for node in self._nodes.values():
            if node.type is node_type:
                yield node

    def jobs(self) -> list[LineageNode]:
        return list(self.get_nodes_by_type(NodeType.JOB))

    def entities(self) -> list[LineageNode]:
        return list(self.get_nodes_by_type(NodeType.ENTITY))

    def successors(self, node_id: str) -> Iterator[str]:
        """
        Get IDs of all nodes this node has an edge to.

        Each neighbor appears once even when parallel edges exist.

        Args:
            node_id: The source node's identifier

        Yields:
            IDs of successor nodes, in the order they were first connected
        """
        if node_id in self._graph:
            yield from self._graph.successors(node_id)

    def predecessors(self, node_id: str) -> Iterator[str]:
        """
        Get IDs of all nodes with an edge to this node.

        Args:
            node_id: The target node's identifier

        Yields:
            IDs of predecessor nodes, in the order they were first connected
        """
        if node_id in self._graph:
            yield from self._graph.predecessors(node_id)

    def out_edges(self, node_id: str, kind: Optional[EdgeKind] = None) -> Iterator[LineageEdge]:
        """Yield edges leaving node_id, optionally restricted to one kind."""
        if node_id not in self._graph:
            return
        for source, target, edge_kind in self._graph.out_edges(node_id, data=KIND_ATTR):
            if kind is None or edge_kind is kind:
                yield LineageEdge(source, target, edge_kind)

    def in_edges(self, node_id: str, kind: Optional[EdgeKind] = None) -> Iterator[LineageEdge]:
        """Yield edges entering node_id, optionally restricted to one kind."""
        if node_id not in self._graph:
            return
        for source, target, edge_kind in self._graph.in_edges(node_id, data=KIND_ATTR):
            if kind is None or edge_kind is kind:
                yield LineageEdge(source, target, edge_kind)

    def incident_edges(self, node_id: str) -> Iterator[LineageEdge]:
        """Yield every edge touching node_id, in global insertion order."""
        for edge in self._edges:
            if edge.touches(node_id):
                yield edge

    def is_acyclic(self) -> bool:
        """Check that no directed cycle exists (self-loops count as cycles)."""
        return nx.is_directed_acyclic_graph(self._graph)

    def subgraph(self, node_ids: Iterable[str]) -> "LineageGraph":
        """
        Return a new graph restricted to the given node ids.

        Node insertion order and edge order follow this graph; unknown ids
        are ignored. Edges are kept only when both endpoints survive.

        Args:
            node_ids: IDs of the nodes to keep

        Returns:
            A new LineageGraph
        """
        keep = {node_id for node_id in node_ids if node_id in self._nodes}
        nodes = [node for node_id, node in self._nodes.items() if node_id in keep]
        edges = [e for e in self._edges if e.source in keep and e.target in keep]
        return LineageGraph.from_parts(nodes, edges)

    def neighborhood(self, node_id: str, max_depth: int) -> "LineageGraph":
        """
        Return the lineage around node_id, following edges by direction.

        For an entity this is everything that feeds it: nodes reaching it
        within max_depth hops against edge direction. For a job it is both
        its upstream and its downstream side, each within max_depth hops.
        Siblings (other outputs of an upstream job) are never included.

        Args:
            node_id: Center of the neighborhood
            max_depth: Maximum number of hops from the center

        Returns:
            A new LineageGraph; empty if node_id is not in this graph

        Raises:
            ValueError: If max_depth is negative
        """
        if max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {max_depth}")
        if node_id not in self._nodes:
            logger.warning("Node %s not found in lineage graph", node_id)
            return LineageGraph.empty()

        upstream = self._graph.reverse(copy=False)
        within = set(nx.single_source_shortest_path_length(upstream, node_id, cutoff=max_depth))
        if self._nodes[node_id].is_job:
            within.update(
                nx.single_source_shortest_path_length(self._graph, node_id, cutoff=max_depth)
            )
        return self.subgraph(within)

    def to_dict(self) -> dict[str, Any]:
        """Serialize as {"nodes": {id: node}, "edges": [edge, ...]}."""
        return {
            "nodes": {node_id: node.to_dict() for node_id, node in self._nodes.items()},
            "edges": [edge.to_dict() for edge in self._edges],
        }


class LineageGraphBuilder:
    """
    Converts job records into a LineageGraph.

    Each call to build() starts from scratch and returns a new graph; no
    state carries over between builds.

    Usage:
        builder = LineageGraphBuilder()
        graph = builder.build(records)
    """

    def __init__(self) -> None:
        self._graph: nx.MultiDiGraph = nx.MultiDiGraph()
        self._edges: list[LineageEdge] = []

    def build(self, records: Optional[Iterable[Any]]) -> LineageGraph:
        """
        Build a lineage graph from job records.

        Args:
            records: JobRecords or mappings in the job-record input shape.
                     Malformed records and entries are skipped.

        Returns:
            The frozen LineageGraph
        """
        normalized, skipped = normalize_records(records)
        logger.info("Building lineage graph from %d job records", len(normalized))

        self._graph = nx.MultiDiGraph()
        self._edges = []

        # First pass: job nodes, so job ids keep their type
        for record in normalized:
            self._add_job(record)

        # Second pass: entity nodes and edges, inputs before outputs
        for record in normalized:
            for ref in record.inputs:
                self._add_entity(ref)
                self._add_edge(ref.id, record.id, EdgeKind.READS)
            for ref in record.outputs:
                self._add_entity(ref)
                self._add_edge(record.id, ref.id, EdgeKind.WRITES)

        graph = LineageGraph(self._graph, self._edges, skipped_records=skipped)
        logger.info(
            "Graph built with %d nodes and %d edges (%d records skipped)",
            graph.node_count,
            graph.edge_count,
            skipped,
        )
        return graph

    def _add_job(self, record: JobRecord) -> None:
        if record.id in self._graph:
            return
        metadata = None if record.metadata.is_empty else record.metadata
        node = LineageNode(
            id=record.id,
            type=NodeType.JOB,
            label=record.name or record.id,
            metadata=metadata,
        )
        self._graph.add_node(node.id, **{NODE_ATTR: node})

    def _add_entity(self, ref: EntityRef) -> None:
        if ref.id in self._graph:
            return
        node = LineageNode(id=ref.id, type=NodeType.ENTITY, label=ref.name or ref.id)
        self._graph.add_node(node.id, **{NODE_ATTR: node})

    def _add_edge(self, source: str, target: str, kind: EdgeKind) -> None:
        self._graph.add_edge(source, target, **{KIND_ATTR: kind})
        self._edges.append(LineageEdge(source, target, kind))


def build_lineage_graph(records: Optional[Iterable[Any]]) -> LineageGraph:
    """
    Build a LineageGraph from job records.

    Args:
        records: JobRecords or mappings shaped like
                 {id, name, inputs?: [{id, name}], outputs?: [{id, name}]}

    Returns:
        A LineageGraph containing all jobs, entities and reads/writes edges

    Example:
        >>> graph = build_lineage_graph([
        ...     {"id": "j1", "name": "Clean", "inputs": [{"id": "d1", "name": "Raw"}],
        ...      "outputs": [{"id": "d2", "name": "Clean"}]},
        ... ])
        >>> graph.node_count, graph.edge_count
        (3, 2)
    """
    return LineageGraphBuilder().build(records)
