"""Per-row intersection pipeline.

This module ties region building, feature resolution, and interval
metrics together for each reference record, and tallies how many
records matched zero, one, or several target features.

Key components:
- ResultRow: Six result fields produced for every reference record
- Summary: Running match counts with percentage reporting
- RowProcessor: Main orchestration class

Example:
    >>> from intersector.core.processor import RowProcessor, Summary
    >>> processor = RowProcessor(config, store, ReferenceKind.COORDINATE)
    >>> summary = Summary()
    >>> for result in processor.process(records, summary):
    ...     print(result.match_count, result.name)
    >>> for line in summary.report_lines():
    ...     print(line)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable, Iterator

import attrs

from intersector.config import IntersectConfig, ReferencePoint
from intersector.core.intervals import (
    distance_from_midpoint,
    distance_from_start,
    overlap_extent,
)
from intersector.core.regions import ReferenceKind, ReferenceRecord, RegionBuilder, SearchRegion
from intersector.core.resolver import FeatureResolver, Resolution

if TYPE_CHECKING:
    from intersector.io.store import Feature, FeatureStore
    from intersector.utils.logging import ProgressLogger

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

# Output column names, in the order they are appended
RESULT_COLUMNS = (
    "Number_features",
    "Target_Name",
    "Target_Type",
    "Target_Strand",
    "Target_Distance",
    "Target_Overlap",
)

# Written in place of missing values
NULL_VALUE = "."


# =============================================================================
# Result Containers
# =============================================================================


@attrs.define(slots=True, frozen=True)
class ResultRow:
    """Result of intersecting one reference record.

    Attributes:
        match_count: Number of candidate features found.
        name: Name of the selected feature.
        type: Type of the selected feature.
        strand: Strand of the selected feature (0 when none).
        distance: Distance from the search region to the feature.
        overlap: Overlap extent between the search region and the feature.
    """

    match_count: int = 0
    name: str | None = None
    type: str | None = None
    strand: int = 0
    distance: int | None = None
    overlap: int | None = None

    @classmethod
    def null(cls) -> ResultRow:
        """Result for a record with no region or no matches."""
        return cls()

    def to_values(self) -> list[str]:
        """Format the result as output column values."""
        return [
            str(v) if v is not None else NULL_VALUE
            for v in (
                self.match_count,
                self.name,
                self.type,
                self.strand,
                self.distance,
                self.overlap,
            )
        ]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary keyed by output column name."""
        return dict(zip(RESULT_COLUMNS, self.to_values()))


@attrs.define(slots=True)
class Summary:
    """Counts of records by number of matched target features.

    Attributes:
        zero: Records with no matching feature.
        one: Records with exactly one matching feature.
        multiple: Records with more than one matching feature.
    """

    zero: int = 0
    one: int = 0
    multiple: int = 0

    @property
    def total(self) -> int:
        """Total records counted."""
        return self.zero + self.one + self.multiple

    def add(self, match_count: int) -> None:
        """Count one record by its match count."""
        if match_count == 0:
            self.zero += 1
        elif match_count == 1:
            self.one += 1
        else:
            self.multiple += 1

    def merge(self, other: Summary) -> Summary:
        """Add the counts from another summary.

        Args:
            other: Summary to merge into this one.

        Returns:
            This summary, for chaining.
        """
        self.zero += other.zero
        self.one += other.one
        self.multiple += other.multiple
        return self

    def percent(self, count: int) -> float:
        """Express a count as a percentage of the total."""
        if self.total == 0:
            return 0.0
        return 100 * count / self.total

    def report_lines(self) -> list[str]:
        """Summary sentences for each non-empty category.

        Returns:
            Lines for unique, zero, and multiple matches, in that order.
        """
        categories = [
            (self.one, "unique target features"),
            (self.zero, "zero target features"),
            (self.multiple, "multiple target features"),
        ]
        return [
            f"{count} ({self.percent(count):.1f}%) reference features intersected with {label}"
            for count, label in categories
            if count
        ]

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary."""
        return {
            "zero": self.zero,
            "one": self.one,
            "multiple": self.multiple,
            "total": self.total,
        }


# =============================================================================
# Main Processor
# =============================================================================


class RowProcessor:
    """Intersect reference records with target features, row by row.

    Rows are independent of each other; the only state carried between
    them is the Summary passed in by the caller.

    Attributes:
        config: Region and distance configuration.
        builder: Region builder for the input's reference kind.
        resolver: Feature resolver for the requested types.
    """

    def __init__(
        self,
        config: IntersectConfig,
        store: FeatureStore,
        kind: ReferenceKind,
    ) -> None:
        """Initialize the processor.

        Args:
            config: Region and distance configuration.
            store: Feature store to search.
            kind: Reference representation of the input source.

        Raises:
            ValueError: If no feature types are configured.
        """
        self.config = config
        self.builder = RegionBuilder(config, store, kind)
        self.resolver = FeatureResolver(store, config.feature_types)

    def measure_distance(self, search: SearchRegion, feature: Feature) -> int:
        """Distance from the search region to a feature.

        Args:
            search: Search region and reference strand.
            feature: Selected target feature.

        Returns:
            Signed distance according to the configured reference point.
        """
        if self.config.reference_point is ReferencePoint.MID:
            return distance_from_midpoint(search.region, feature)
        return distance_from_start(
            search.region, search.reference_strand, feature, feature.strand
        )

    def build_result(self, search: SearchRegion, resolution: Resolution) -> ResultRow:
        """Assemble the result for a resolved region."""
        feature = resolution.feature
        if feature is None:
            return ResultRow.null()

        return ResultRow(
            match_count=resolution.match_count,
            name=feature.name,
            type=feature.type,
            strand=feature.strand,
            distance=self.measure_distance(search, feature),
            overlap=overlap_extent(search.region, feature),
        )

    def process_record(self, record: ReferenceRecord) -> ResultRow:
        """Intersect a single reference record.

        Args:
            record: Reference record.

        Returns:
            ResultRow; the null result if no region could be built.
        """
        search = self.builder.build(record)
        if search is None:
            return ResultRow.null()

        resolution = self.resolver.resolve(search.region)
        return self.build_result(search, resolution)

    def process(
        self,
        records: Iterable[ReferenceRecord],
        summary: Summary,
        progress: ProgressLogger | None = None,
    ) -> Iterator[ResultRow]:
        """Intersect reference records in order.

        Args:
            records: Reference records.
            summary: Summary updated with each record's match count.
            progress: Optional progress logger.

        Yields:
            One ResultRow per record, in input order.
        """
        for record in records:
            result = self.process_record(record)
            summary.add(result.match_count)
            if progress is not None:
                progress.update()
            yield result
