"""
Query module for the lineage engine.

Read-only questions over a built LineageGraph: simple-path tracing,
upstream/downstream dependency resolution, and summary statistics.
"""

from lineage.query.dependencies import (
    DependencyResolver,
    dependencies_of,
    jobs_using,
)
from lineage.query.paths import PathTracer, trace_paths
from lineage.query.stats import summarize_lineage

__all__ = [
    "DependencyResolver",
    "PathTracer",
    "dependencies_of",
    "jobs_using",
    "summarize_lineage",
    "trace_paths",
]
