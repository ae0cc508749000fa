"""Core intersection logic for Intersector.

This module contains the per-row intersection pipeline:

- intervals: Overlap extent and distance metrics
- regions: Search region construction from reference records
- resolver: Selection of one target among overlapping candidates
- processor: Per-row orchestration and match summaries

Example:
    >>> from intersector.core import RowProcessor, Summary
    >>> processor = RowProcessor(config, store, table.kind)
    >>> results = list(processor.process(table.iter_records(), Summary()))
"""

from intersector.core.intervals import (
    GenomicInterval,
    distance_from_midpoint,
    distance_from_start,
    overlap_extent,
)
from intersector.core.processor import ResultRow, RowProcessor, Summary
from intersector.core.regions import (
    ReferenceKind,
    ReferenceRecord,
    RegionBuilder,
    SearchRegion,
    adjust_interval,
    clamp_interval,
)
from intersector.core.resolver import FeatureResolver, Resolution

__all__ = [
    "GenomicInterval",
    "overlap_extent",
    "distance_from_start",
    "distance_from_midpoint",
    "ReferenceKind",
    "ReferenceRecord",
    "RegionBuilder",
    "SearchRegion",
    "adjust_interval",
    "clamp_interval",
    "FeatureResolver",
    "Resolution",
    "ResultRow",
    "RowProcessor",
    "Summary",
]
