"""Tests for interval metrics.

Tests cover:
- Overlap extent (span from lowest start to highest end)
- Strand-aware 5' distance for all four strand combinations
- Midpoint distance rounding
"""

import pytest

from intersector.core.intervals import (
    GenomicInterval,
    distance_from_midpoint,
    distance_from_start,
    overlap_extent,
)


# =============================================================================
# GenomicInterval
# =============================================================================


class TestGenomicInterval:
    """Tests for GenomicInterval NamedTuple."""

    def test_creation_defaults_unstranded(self):
        """Strand defaults to 0."""
        interval = GenomicInterval("chr1", 100, 200)
        assert interval.strand == 0

    def test_length_inclusive(self):
        """Length counts both ends."""
        assert GenomicInterval("chr1", 100, 200).length == 101
        assert GenomicInterval("chr1", 100, 100).length == 1

    def test_midpoint(self):
        """Midpoint may be fractional."""
        assert GenomicInterval("chr1", 100, 200).midpoint == 150
        assert GenomicInterval("chr1", 100, 201).midpoint == 150.5

    def test_str(self):
        """String form is seqid:start-end."""
        assert str(GenomicInterval("chr1", 100, 200, -1)) == "chr1:100-200"

    def test_overlaps_shared_base(self):
        """Intervals sharing one base overlap (inclusive ends)."""
        a = GenomicInterval("chr1", 100, 200)
        b = GenomicInterval("chr1", 200, 300)
        assert a.overlaps(b)
        assert b.overlaps(a)

    def test_overlaps_different_seqid(self):
        """Intervals on different sequences never overlap."""
        a = GenomicInterval("chr1", 100, 200)
        b = GenomicInterval("chr2", 100, 200)
        assert not a.overlaps(b)


# =============================================================================
# overlap_extent
# =============================================================================


class TestOverlapExtent:
    """Tests for overlap_extent."""

    def test_identical_intervals(self):
        """Identical intervals give their own length."""
        a = GenomicInterval("chr1", 1000, 2000)
        assert overlap_extent(a, a) == a.length == 1001

    def test_partial_overlap_spans_both(self):
        """Partial overlap measures from lowest start to highest end."""
        a = GenomicInterval("chr1", 100, 300)
        b = GenomicInterval("chr1", 200, 400)
        assert overlap_extent(a, b) == 301

    def test_disjoint_intervals_still_span(self):
        """Disjoint intervals give the span across the gap, not zero."""
        a = GenomicInterval("chr1", 100, 200)
        b = GenomicInterval("chr1", 300, 400)
        assert overlap_extent(a, b) == 301
        assert overlap_extent(b, a) == 301

    def test_contained_interval(self):
        """A contained interval gives the outer interval length."""
        outer = GenomicInterval("chr1", 1000, 2000)
        inner = GenomicInterval("chr1", 1500, 1800)
        assert overlap_extent(outer, inner) == 1001

    def test_symmetric(self):
        """Argument order does not matter."""
        a = GenomicInterval("chr1", 100, 250)
        b = GenomicInterval("chr1", 200, 900)
        assert overlap_extent(a, b) == overlap_extent(b, a)

    def test_inverted_span_is_zero(self):
        """Returns zero when the lowest start is beyond the highest end."""
        a = GenomicInterval("chr1", 500, 100)
        b = GenomicInterval("chr1", 400, 200)
        assert overlap_extent(a, b) == 0


# =============================================================================
# distance_from_start
# =============================================================================


class TestDistanceFromStart:
    """Tests for the strand-aware 5' distance."""

    REF = GenomicInterval("chr1", 100, 200)
    TARGET = GenomicInterval("chr1", 250, 300)

    def test_both_forward(self):
        """target.start - ref.start."""
        assert distance_from_start(self.REF, 1, self.TARGET, 1) == 150

    def test_forward_reference_reverse_target(self):
        """target.end - ref.start."""
        assert distance_from_start(self.REF, 1, self.TARGET, -1) == 200

    def test_reverse_reference_forward_target(self):
        """target.start - ref.end."""
        assert distance_from_start(self.REF, -1, self.TARGET, 1) == 50

    def test_both_reverse(self):
        """target.end - ref.end."""
        assert distance_from_start(self.REF, -1, self.TARGET, -1) == 100

    def test_unstranded_treated_as_forward(self):
        """Strand 0 behaves like the forward strand."""
        assert distance_from_start(self.REF, 0, self.TARGET, 0) == 150
        assert distance_from_start(self.REF, 0, self.TARGET, -1) == 200

    def test_upstream_target_is_negative(self):
        """A target before the reference gives a negative distance."""
        ref = GenomicInterval("chr1", 1000, 2000)
        target = GenomicInterval("chr1", 500, 800)
        assert distance_from_start(ref, 1, target, 1) == -500


# =============================================================================
# distance_from_midpoint
# =============================================================================


class TestDistanceFromMidpoint:
    """Tests for the midpoint distance."""

    def test_integer_midpoints(self):
        """Whole midpoints subtract exactly."""
        ref = GenomicInterval("chr1", 100, 200)
        target = GenomicInterval("chr1", 250, 300)
        assert distance_from_midpoint(ref, target) == 125

    def test_half_rounds_up(self):
        """A positive half difference rounds up."""
        ref = GenomicInterval("chr1", 100, 201)  # mid 150.5
        target = GenomicInterval("chr1", 250, 300)  # mid 275
        assert distance_from_midpoint(ref, target) == 125

    @pytest.mark.parametrize(
        ("ref", "target", "expected"),
        [
            # -125 + 0.5 truncates toward zero
            (GenomicInterval("chr1", 250, 300), GenomicInterval("chr1", 100, 200), -124),
            # -124.5 + 0.5 is exactly -124
            (GenomicInterval("chr1", 250, 300), GenomicInterval("chr1", 100, 201), -124),
        ],
    )
    def test_negative_truncates(self, ref, target, expected):
        """Negative differences add one half then truncate toward zero."""
        assert distance_from_midpoint(ref, target) == expected

    def test_strand_ignored(self):
        """Strand does not affect the midpoint distance."""
        ref = GenomicInterval("chr1", 100, 200, -1)
        target = GenomicInterval("chr1", 250, 300, 1)
        assert distance_from_midpoint(ref, target) == 125
