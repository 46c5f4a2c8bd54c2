"""
Lineage Statistics

Summary counts over a lineage graph, as shown at the top of a lineage report.
"""

from lineage.graph.builder import LineageGraph
from lineage.models import EdgeKind, LineageStats

FAILED_STATUSES = frozenset({"FAILED", "FAILURE", "ERROR"})


def summarize_lineage(graph: LineageGraph) -> LineageStats:
    """
    Compute summary statistics for a graph.

    Jobs without a status count as active; only a failed status
    (see FAILED_STATUSES, case-insensitive) counts as failed.

    Args:
        graph: The lineage graph to summarize

    Returns:
        LineageStats for the graph
    """
    jobs = graph.jobs()
    entities = graph.entities()

    failed_jobs = 0
    isolated_jobs = 0
    for job in jobs:
        status = job.metadata.status if job.metadata else None
        if status is not None and status.upper() in FAILED_STATUSES:
            failed_jobs += 1
        if graph.graph.degree(job.id) == 0:
            isolated_jobs += 1

    source_entities = sum(
        1 for entity in entities if not any(graph.in_edges(entity.id, EdgeKind.WRITES))
    )
    sink_entities = sum(
        1 for entity in entities if not any(graph.out_edges(entity.id, EdgeKind.READS))
    )

    reads = sum(1 for edge in graph.edges if edge.kind is EdgeKind.READS)
    writes = graph.edge_count - reads

    return LineageStats(
        total_jobs=len(jobs),
        total_entities=len(entities),
        total_edges=graph.edge_count,
        active_jobs=len(jobs) - failed_jobs,
        failed_jobs=failed_jobs,
        source_entities=source_entities,
        sink_entities=sink_entities,
        isolated_jobs=isolated_jobs,
        avg_inputs_per_job=reads / len(jobs) if jobs else 0.0,
        avg_outputs_per_job=writes / len(jobs) if jobs else 0.0,
        is_acyclic=graph.is_acyclic(),
    )
