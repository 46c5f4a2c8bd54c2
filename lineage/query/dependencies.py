"""
Dependency Resolution for the lineage engine

Answers "what produces this entity, and what consumes it?" for a single
data entity.

The neighborhood is bounded to one job on each side:

    upstream.entities --reads--> upstream.jobs --writes--> ENTITY
    ENTITY --reads--> downstream.jobs --writes--> downstream.entities

It is not a transitive closure; repeated calls (or trace_paths) walk further.
"""

import logging
from collections.abc import Iterable
from typing import Optional

from lineage.graph.builder import LineageGraph
from lineage.models import DependencySet, DependencySide, EdgeKind, LineageNode, NodeType

logger = logging.getLogger(__name__)


def _unique_nodes(
    graph: LineageGraph, node_ids: Iterable[str], node_type: NodeType
) -> list[LineageNode]:
    seen: set[str] = set()
    nodes = []
    for node_id in node_ids:
        if node_id in seen:
            continue
        seen.add(node_id)
        node = graph.get_node(node_id)
        if node is not None and node.type is node_type:
            nodes.append(node)
    return nodes


class DependencyResolver:
    """
    Resolves upstream/downstream neighborhoods of entity nodes.

    Usage:
        resolver = DependencyResolver(graph)
        deps = resolver.dependencies_of("clean_orders")
        if deps is not None:
            producers = [job.label for job in deps.upstream.jobs]
    """

    def __init__(self, graph: LineageGraph) -> None:
        self._graph = graph

    def _entity(self, entity_id: str) -> Optional[LineageNode]:
        node = self._graph.get_node(entity_id)
        if node is None or not node.is_entity:
            return None
        return node

    def dependencies_of(self, entity_id: str) -> Optional[DependencySet]:
        """
        Get the producing and consuming side of an entity.

        Args:
            entity_id: ID of an entity node

        Returns:
            DependencySet, or None if the id is absent or names a job
        """
        entity = self._entity(entity_id)
        if entity is None:
            logger.warning("Entity %s not found in graph", entity_id)
            return None

        graph = self._graph

        producers = _unique_nodes(
            graph,
            (edge.source for edge in graph.in_edges(entity_id, EdgeKind.WRITES)),
            NodeType.JOB,
        )
        producer_inputs = _unique_nodes(
            graph,
            (
                edge.source
                for job in producers
                for edge in graph.in_edges(job.id, EdgeKind.READS)
            ),
            NodeType.ENTITY,
        )

        consumers = _unique_nodes(
            graph,
            (edge.target for edge in graph.out_edges(entity_id, EdgeKind.READS)),
            NodeType.JOB,
        )
        consumer_outputs = _unique_nodes(
            graph,
            (
                edge.target
                for job in consumers
                for edge in graph.out_edges(job.id, EdgeKind.WRITES)
            ),
            NodeType.ENTITY,
        )

        return DependencySet(
            entity=entity,
            upstream=DependencySide(jobs=producers, entities=producer_inputs),
            downstream=DependencySide(jobs=consumers, entities=consumer_outputs),
        )

    def jobs_using(self, entity_id: str) -> list[LineageNode]:
        """
        Get every job that reads or writes an entity.

        Args:
            entity_id: ID of an entity node

        Returns:
            Job nodes in the order their first edge to the entity was added;
            empty if the entity is absent, unused, or the id names a job
        """
        if self._entity(entity_id) is None:
            return []
        return _unique_nodes(
            self._graph,
            (edge.other_end(entity_id) for edge in self._graph.incident_edges(entity_id)),
            NodeType.JOB,
        )


def dependencies_of(graph: LineageGraph, entity_id: str) -> Optional[DependencySet]:
    """Resolve the through-one-job neighborhood of an entity. See DependencyResolver."""
    return DependencyResolver(graph).dependencies_of(entity_id)


def jobs_using(graph: LineageGraph, entity_id: str) -> list[LineageNode]:
    """Get every job reading or writing an entity. See DependencyResolver."""
    return DependencyResolver(graph).jobs_using(entity_id)
