"""
CLI module for the lineage engine.

The command-line interface providing summary, paths, deps, jobs, export
and diagram commands over a JSON file of job records.
"""

from lineage_cli.main import app

__all__ = ["app"]
