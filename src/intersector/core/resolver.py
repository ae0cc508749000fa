"""Resolution of overlapping target features.

A search region can overlap zero, one, or many features of the requested
types. The resolver queries the feature store and reduces the result to
a single feature:

- no candidates: nothing is selected
- one candidate: it is selected
- several candidates: the one with the greatest overlap extent with the
  region is selected. Candidates with equal extent are decided by store
  iteration order, the later candidate winning.

The number of candidates is always reported, even when one was chosen
out of many.

Example:
    >>> from intersector.core.resolver import FeatureResolver
    >>> resolver = FeatureResolver(store, ["gene", "ncRNA_gene"])
    >>> resolution = resolver.resolve(region)
    >>> resolution.match_count, resolution.feature
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Sequence

import attrs

from intersector.core.intervals import GenomicInterval, overlap_extent

if TYPE_CHECKING:
    from intersector.io.store import Feature, FeatureStore

logger = logging.getLogger(__name__)


@attrs.define(slots=True, frozen=True)
class Resolution:
    """Outcome of resolving a region against the store.

    Attributes:
        feature: Selected feature, or None when nothing overlapped.
        match_count: Number of candidates returned by the query.
    """

    feature: Feature | None
    match_count: int = 0

    @property
    def found(self) -> bool:
        """Whether a feature was selected."""
        return self.feature is not None


NO_RESOLUTION = Resolution(feature=None, match_count=0)


def select_best(region: GenomicInterval, candidates: Sequence[Feature]) -> Feature | None:
    """Select the candidate with the greatest overlap extent.

    Args:
        region: Search region.
        candidates: Candidates in store iteration order.

    Returns:
        The best candidate, the last one seen among equals, or None if
        there are no candidates.
    """
    if not candidates:
        return None
    _, _, best = max(
        (overlap_extent(region, feature), i, feature)
        for i, feature in enumerate(candidates)
    )
    return best


class FeatureResolver:
    """Query the store for a region and pick one feature.

    Attributes:
        store: Feature store to query.
        feature_types: Requested feature types.

    Raises:
        ValueError: If no feature types are given.
    """

    def __init__(self, store: FeatureStore, feature_types: Iterable[str]) -> None:
        self.store = store
        self.feature_types = list(feature_types)
        if not self.feature_types:
            raise ValueError("At least one feature type is required to search")

    def candidates(self, region: GenomicInterval) -> list[Feature]:
        """Get all features of the requested types overlapping a region."""
        return self.store.query(region.seqid, region.start, region.end, self.feature_types)

    def resolve(self, region: GenomicInterval) -> Resolution:
        """Resolve a region to a single feature.

        Args:
            region: Search region.

        Returns:
            Resolution with the selected feature and candidate count.
        """
        found = self.candidates(region)
        if not found:
            return NO_RESOLUTION
        if len(found) == 1:
            return Resolution(feature=found[0], match_count=1)

        best = select_best(region, found)
        logger.debug(
            f"{len(found)} features overlap {region}, selected {best.name if best else None}"
        )
        return Resolution(feature=best, match_count=len(found))
