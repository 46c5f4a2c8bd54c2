"""
Core Data Models for the lineage engine

This module defines the canonical data structures used throughout the system:
- LineageNode: A pipeline job or a data entity
- LineageEdge: A directed reads/writes relationship between two nodes
- JobRecord / EntityRef: Normalized input records
- DataPath, DependencySet, LineageStats: Query results

These models are designed to be:
- Immutable where possible (using frozen dataclasses)
- Serializable via to_dict() for JSON export
- Closed over their variants (NodeType, EdgeKind) so consumers can branch exhaustively
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class NodeType(Enum):
    """
    Kind of node in the lineage graph.

    States:
        JOB: A processing unit that reads and writes entities.
        ENTITY: A data artifact consumed or produced by jobs.
    """

    JOB = "job"
    ENTITY = "entity"


class EdgeKind(Enum):
    """
    Kind of directed relationship between a job and an entity.

    States:
        READS: entity -> job, the job consumes the entity.
        WRITES: job -> entity, the job produces the entity.
    """

    READS = "reads"
    WRITES = "writes"


@dataclass(frozen=True)
class JobMetadata:
    """
    Operational details carried from a job record onto its node.

    Attributes:
        status: Last known run status (e.g. "SUCCESS", "FAILED")
        owner: Display name of the job owner
        execution_count: Number of recorded executions
        success_rate: Fraction of successful executions
        last_updated: Timestamp string as supplied by the source
    """

    status: Optional[str] = None
    owner: Optional[str] = None
    execution_count: Optional[int] = None
    success_rate: Optional[float] = None
    last_updated: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        """True if no field carries a value."""
        return not self.to_dict()

    def to_dict(self) -> dict[str, Any]:
        """Return only the populated fields."""
        values = {
            "status": self.status,
            "owner": self.owner,
            "execution_count": self.execution_count,
            "success_rate": self.success_rate,
            "last_updated": self.last_updated,
        }
        return {key: value for key, value in values.items() if value is not None}


@dataclass(frozen=True)
class LineageNode:
    """
    A single node in the lineage graph.

    Attributes:
        id: Identifier unique within a graph, stable across rebuilds
        type: Whether this node is a job or an entity
        label: Display name, defaults to id when the source has none
        metadata: Operational details, only ever set on job nodes

    Invariants:
        - id is never empty
        - metadata is None for entity nodes
    """

    id: str
    type: NodeType
    label: str = ""
    metadata: Optional[JobMetadata] = None

    def __post_init__(self) -> None:
        """Validate invariants after initialization."""
        if not self.id:
            raise ValueError("LineageNode.id must not be empty")
        if not self.label:
            # Frozen dataclass: bypass __setattr__ for the default label
            object.__setattr__(self, "label", self.id)
        if self.type is NodeType.ENTITY and self.metadata is not None:
            raise ValueError(f"Entity node {self.id!r} cannot carry job metadata")

    @property
    def is_job(self) -> bool:
        return self.type is NodeType.JOB

    @property
    def is_entity(self) -> bool:
        return self.type is NodeType.ENTITY

    def to_dict(self) -> dict[str, Any]:
        """Serialize as {id, type, label}, plus metadata when a job has any."""
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "label": self.label,
        }
        if self.metadata is not None and not self.metadata.is_empty:
            data["metadata"] = self.metadata.to_dict()
        return data


@dataclass(frozen=True)
class LineageEdge:
    """
    A directed relationship between two node ids.

    Attributes:
        source: ID of the node the edge leaves (an entity for READS, a job for WRITES)
        target: ID of the node the edge enters
        kind: READS or WRITES

    Note:
        Serialized with the keys "from" and "to".
    """

    source: str
    target: str
    kind: EdgeKind

    def touches(self, node_id: str) -> bool:
        """Check if either endpoint is the given node."""
        return self.source == node_id or self.target == node_id

    def other_end(self, node_id: str) -> str:
        """Return the endpoint opposite to node_id."""
        return self.target if self.source == node_id else self.source

    def to_dict(self) -> dict[str, str]:
        return {"from": self.source, "to": self.target, "kind": self.kind.value}


@dataclass(frozen=True)
class EntityRef:
    """A reference from a job record to a data entity."""

    id: str
    name: Optional[str] = None


@dataclass(frozen=True)
class JobRecord:
    """
    A normalized pipeline-job record.

    Produced by lineage.records.normalize_record from loosely structured
    input. Only the id is required; everything else has a usable default.

    Attributes:
        id: Job identifier
        name: Display name, None if the source supplied none
        inputs: Entities the job reads
        outputs: Entities the job writes
        metadata: Operational details for the job node
    """

    id: str
    name: Optional[str] = None
    inputs: tuple[EntityRef, ...] = ()
    outputs: tuple[EntityRef, ...] = ()
    metadata: JobMetadata = field(default_factory=JobMetadata)


@dataclass(frozen=True)
class DataPath:
    """
    A simple path through the lineage graph.

    Attributes:
        nodes: Ordered nodes from the queried source to the queried target

    Invariants:
        - No node id appears twice
        - distance == len(nodes) - 1
    """

    nodes: tuple[LineageNode, ...]

    @property
    def distance(self) -> int:
        """Number of edges traversed."""
        return len(self.nodes) - 1

    @property
    def node_ids(self) -> list[str]:
        return [node.id for node in self.nodes]

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "distance": self.distance,
        }


@dataclass
class DependencySide:
    """Jobs and entities on one side (upstream or downstream) of an entity."""

    jobs: list[LineageNode] = field(default_factory=list)
    entities: list[LineageNode] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.jobs and not self.entities

    def to_dict(self) -> dict[str, Any]:
        return {
            "jobs": [node.to_dict() for node in self.jobs],
            "entities": [node.to_dict() for node in self.entities],
        }


@dataclass
class DependencySet:
    """
    Through-one-job neighborhood of a data entity.

    Attributes:
        entity: The entity node the dependencies were resolved for
        upstream: Producing jobs and the entities they read
        downstream: Consuming jobs and the entities they write
    """

    entity: LineageNode
    upstream: DependencySide = field(default_factory=DependencySide)
    downstream: DependencySide = field(default_factory=DependencySide)

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity": self.entity.to_dict(),
            "upstream": self.upstream.to_dict(),
            "downstream": self.downstream.to_dict(),
        }


@dataclass
class LineageStats:
    """
    Summary of a lineage graph.

    Attributes:
        total_jobs: Number of job nodes
        total_entities: Number of entity nodes
        total_edges: Number of edges, parallel edges included
        active_jobs: Jobs whose status is anything other than FAILED
        failed_jobs: Jobs whose status is FAILED
        source_entities: Entities no job writes
        sink_entities: Entities no job reads
        isolated_jobs: Jobs with no edges at all
        avg_inputs_per_job: Mean number of READS edges per job
        avg_outputs_per_job: Mean number of WRITES edges per job
        is_acyclic: False if any job feeds itself, directly or indirectly
    """

    total_jobs: int = 0
    total_entities: int = 0
    total_edges: int = 0
    active_jobs: int = 0
    failed_jobs: int = 0
    source_entities: int = 0
    sink_entities: int = 0
    isolated_jobs: int = 0
    avg_inputs_per_job: float = 0.0
    avg_outputs_per_job: float = 0.0
    is_acyclic: bool = True

    @property
    def total_nodes(self) -> int:
        """Total number of nodes in the graph."""
        return self.total_jobs + self.total_entities

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_jobs": self.total_jobs,
            "total_entities": self.total_entities,
            "total_edges": self.total_edges,
            "active_jobs": self.active_jobs,
            "failed_jobs": self.failed_jobs,
            "source_entities": self.source_entities,
            "sink_entities": self.sink_entities,
            "isolated_jobs": self.isolated_jobs,
            "avg_inputs_per_job": self.avg_inputs_per_job,
            "avg_outputs_per_job": self.avg_outputs_per_job,
            "is_acyclic": self.is_acyclic,
        }
