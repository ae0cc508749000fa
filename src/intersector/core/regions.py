"""Search region construction.

This module turns a reference record into the genomic region that is
searched for intersecting features. The region is derived from the
reference's own interval and the positional configuration, in priority
order:

1. ``extend``: pad both sides symmetrically (strand is dropped)
2. ``start_offset``/``stop_offset``: a window relative to the 5' end,
   3' end, or midpoint of the reference, honoring its strand
3. neither: the reference interval itself

Coordinate conventions:
    - All coordinates are 1-based inclusive (GFF3 convention)
    - Region starts are clamped to 1
    - Coordinate-based region ends are clamped to the chromosome length

Example:
    >>> from intersector.config import IntersectConfig
    >>> from intersector.core.intervals import GenomicInterval
    >>> from intersector.core.regions import adjust_interval
    >>> config = IntersectConfig(start_offset=-200, stop_offset=0)
    >>> adjust_interval(GenomicInterval("chr1", 1000, 2000, -1), config)
    GenomicInterval(seqid='chr1', start=2000, end=2200, strand=-1)
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple

import attrs

from intersector.config import Anchor, IntersectConfig
from intersector.core.intervals import GenomicInterval

if TYPE_CHECKING:
    from intersector.io.store import FeatureStore

logger = logging.getLogger(__name__)


# =============================================================================
# Reference Records
# =============================================================================


class ReferenceKind(Enum):
    """How reference rows identify their genomic location."""

    COORDINATE = "coordinate"
    NAMED = "named"


@attrs.define(slots=True, frozen=True)
class ReferenceRecord:
    """A single reference row.

    Coordinate records carry seqid/start/end/strand directly. Named
    records carry a name (and optionally a type) that is resolved through
    the feature store when the region is built.

    Attributes:
        row_index: Zero-based index of the row in its source table.
        seqid: Chromosome name (coordinate records).
        start: Start position, 1-based (coordinate records).
        end: End position, 1-based inclusive (coordinate records).
        strand: Strand (1, -1, or 0).
        name: Feature name or ID (named records).
        type: Feature type (named records, optional).
    """

    row_index: int
    seqid: str | None = None
    start: int | None = None
    end: int | None = None
    strand: int = 0
    name: str | None = None
    type: str | None = None

    @property
    def label(self) -> str:
        """Human-readable description for log messages."""
        if self.name is not None:
            return f"{self.type or ''} {self.name}".strip()
        return f"{self.seqid}:{self.start}..{self.end}"


class SearchRegion(NamedTuple):
    """A search region and the strand of the reference it was built from.

    Attributes:
        region: Region to query (its strand is 0 when extended).
        reference_strand: Strand of the reference, used for distances.
    """

    region: GenomicInterval
    reference_strand: int


# =============================================================================
# Coordinate Parsing
# =============================================================================

# Handles: chr1:1000-2000, chr1:1000..2000, scaffold_123:100-200
_REGION_PATTERN = re.compile(r"^([\w.\-]+):(\d+)(?:\.\.|-)(\d+)$")


def parse_region(region_str: str, strand: int = 0) -> GenomicInterval:
    """Parse a coordinate string into a GenomicInterval.

    Supported formats:
        chr1:1000-2000      (1-based, inclusive)
        chr1:1000..2000     (1-based, inclusive - GFF style)

    Args:
        region_str: Region string in format seqid:start-end.
        strand: Strand to attach to the interval.

    Returns:
        GenomicInterval with 1-based inclusive coordinates.

    Raises:
        ValueError: If the format is invalid.
    """
    match = _REGION_PATTERN.match(region_str.strip())
    if not match:
        raise ValueError(
            f"Invalid region format: '{region_str}'. "
            "Expected format: seqid:start-end (e.g., chr1:1000-2000)"
        )
    return GenomicInterval(match.group(1), int(match.group(2)), int(match.group(3)), strand)


# =============================================================================
# Region Arithmetic
# =============================================================================


def adjust_interval(interval: GenomicInterval, config: IntersectConfig) -> GenomicInterval:
    """Apply extension or anchored offsets to a reference interval.

    Args:
        interval: Reference interval with its strand.
        config: Region configuration.

    Returns:
        Unclamped search interval.
    """
    seqid, start, end, strand = interval

    if config.extend:
        return GenomicInterval(seqid, start - config.extend, end + config.extend, 0)

    if config.use_offsets:
        so = config.start_offset
        eo = config.stop_offset
        assert so is not None and eo is not None

        if config.anchor is Anchor.FIVE:
            if strand >= 0:
                return GenomicInterval(seqid, start + so, start + eo, strand)
            return GenomicInterval(seqid, end - eo, end - so, strand)

        if config.anchor is Anchor.THREE:
            if strand >= 0:
                return GenomicInterval(seqid, end + so, end + eo, strand)
            return GenomicInterval(seqid, start - eo, start - so, strand)

        # Midpoint windows are not mirrored for reverse strand references
        mid = int((start + end) / 2)
        return GenomicInterval(seqid, mid + so, mid + eo, strand)

    return interval


def clamp_interval(
    interval: GenomicInterval,
    max_length: int | None = None,
) -> GenomicInterval:
    """Clamp an interval to the bounds of its chromosome.

    Args:
        interval: Interval to clamp.
        max_length: Chromosome length, if known.

    Returns:
        Interval with start >= 1 and, when a length is given, end <= length.
    """
    start = max(interval.start, 1)
    end = interval.end
    if max_length and end > max_length:
        end = max_length
    return interval._replace(start=start, end=end)


# =============================================================================
# Region Builder
# =============================================================================


class RegionBuilder:
    """Build search regions for reference records.

    Named records are resolved to features through the store. Coordinate
    records are clamped to chromosome lengths reported by the store.

    Attributes:
        config: Region configuration.
        store: Feature store used for named lookups and lengths.
        kind: Reference representation of the input source.

    Example:
        >>> builder = RegionBuilder(config, store, ReferenceKind.COORDINATE)
        >>> search = builder.build(record)
        >>> if search is not None:
        ...     print(search.region)
    """

    def __init__(
        self,
        config: IntersectConfig,
        store: FeatureStore,
        kind: ReferenceKind,
    ) -> None:
        self.config = config
        self.store = store
        self.kind = kind
        self._lengths: dict[str, int] = store.lengths() if kind is ReferenceKind.COORDINATE else {}

    def reference_interval(self, record: ReferenceRecord) -> GenomicInterval | None:
        """Establish the unadjusted interval of a reference record.

        Args:
            record: Reference record.

        Returns:
            Reference interval, or None if it cannot be established.
        """
        if self.kind is ReferenceKind.NAMED:
            if not record.name:
                return None
            feature = self.store.get_feature(record.name, record.type)
            if feature is None:
                return None
            return feature.interval

        if record.seqid is None or record.start is None or record.end is None:
            return None
        return GenomicInterval(record.seqid, record.start, record.end, record.strand)

    def build(self, record: ReferenceRecord) -> SearchRegion | None:
        """Build the search region for a reference record.

        Args:
            record: Reference record.

        Returns:
            SearchRegion, or None if no region could be established. A
            warning is logged in that case.
        """
        interval = self.reference_interval(record)
        if interval is None:
            logger.warning(f"Unable to establish region for {record.label}")
            return None

        region = adjust_interval(interval, self.config)

        if self.kind is ReferenceKind.COORDINATE:
            region = clamp_interval(region, self._lengths.get(region.seqid))
        else:
            region = clamp_interval(region)

        return SearchRegion(region, interval.strand)
