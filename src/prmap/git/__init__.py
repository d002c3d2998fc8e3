"""Git side of prmap: branch synchronization and diff aggregation."""

from prmap.git.aggregator import AggregateLookup, TouchedLineMap, touched_lines
from prmap.git.sync import sync_pull_request

__all__ = ["AggregateLookup", "TouchedLineMap", "sync_pull_request", "touched_lines"]
