"""Genomic interval geometry.

This module provides the geometric metrics used when comparing a
reference region with a target feature:

- Overlap extent
- Strand-aware distance between 5' ends
- Distance between midpoints

All coordinates are 1-based and inclusive on both ends, matching GFF3.

Example:
    >>> from intersector.core.intervals import GenomicInterval, overlap_extent
    >>> a = GenomicInterval("chr1", 1000, 2000, 1)
    >>> b = GenomicInterval("chr1", 1500, 1800, 1)
    >>> overlap_extent(a, b)
    1001
"""

from __future__ import annotations

from typing import NamedTuple, Protocol

# =============================================================================
# Data Structures
# =============================================================================


class HasCoordinates(Protocol):
    """Anything with 1-based inclusive start and end coordinates."""

    @property
    def start(self) -> int: ...

    @property
    def end(self) -> int: ...


class GenomicInterval(NamedTuple):
    """A genomic interval with chromosome and strand.

    Attributes:
        seqid: Chromosome/contig identifier.
        start: Start position (1-based, inclusive).
        end: End position (1-based, inclusive).
        strand: Strand as an integer (1, -1, or 0 for unstranded).
    """

    seqid: str
    start: int
    end: int
    strand: int = 0

    def __str__(self) -> str:
        """Return string representation as seqid:start-end."""
        return f"{self.seqid}:{self.start}-{self.end}"

    @property
    def length(self) -> int:
        """Get interval length in base pairs."""
        return self.end - self.start + 1

    @property
    def midpoint(self) -> float:
        """Get the (possibly fractional) midpoint."""
        return (self.start + self.end) / 2

    def overlaps(self, other: GenomicInterval) -> bool:
        """Check if this interval overlaps another on the same sequence."""
        if self.seqid != other.seqid:
            return False
        return self.start <= other.end and other.start <= self.end


# =============================================================================
# Metrics
# =============================================================================


def overlap_extent(a: HasCoordinates, b: HasCoordinates) -> int:
    """Calculate the overlap extent between two intervals.

    The extent runs from the lower of the two starts to the higher of the
    two ends, so it measures the span covered by both intervals together
    rather than their shared bases. Disjoint intervals therefore still get
    a positive value.

    Args:
        a: First interval (usually the query region).
        b: Second interval (usually the target feature).

    Returns:
        Span length, or 0 if the computed span is inverted.
    """
    istart = min(a.start, b.start)
    istop = max(a.end, b.end)
    if istart > istop:
        return 0
    return istop - istart + 1


def distance_from_start(
    ref: HasCoordinates,
    ref_strand: int,
    target: HasCoordinates,
    target_strand: int,
) -> int:
    """Calculate signed distance between the 5' ends of two intervals.

    Unstranded intervals (strand 0) are treated as forward strand.

    Args:
        ref: Reference interval.
        ref_strand: Strand of the reference.
        target: Target interval.
        target_strand: Strand of the target.

    Returns:
        Distance from the reference 5' end to the target 5' end.
    """
    if ref_strand >= 0 and target_strand >= 0:
        return target.start - ref.start
    if ref_strand >= 0 and target_strand < 0:
        return target.end - ref.start
    if ref_strand < 0 and target_strand >= 0:
        return target.start - ref.end
    return target.end - ref.end


def distance_from_midpoint(ref: HasCoordinates, target: HasCoordinates) -> int:
    """Calculate distance between the midpoints of two intervals.

    Strand is irrelevant since the midpoint is equidistant from both ends.
    The difference is rounded by adding one half and truncating.

    Args:
        ref: Reference interval.
        target: Target interval.

    Returns:
        Rounded midpoint distance.
    """
    ref_mid = (ref.start + ref.end) / 2
    target_mid = (target.start + target.end) / 2
    return int(target_mid - ref_mid + 0.5)
