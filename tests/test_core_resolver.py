"""Tests for target feature resolution."""

import pytest

from intersector.core.intervals import GenomicInterval
from intersector.core.resolver import NO_RESOLUTION, FeatureResolver, Resolution, select_best
from intersector.io.store import MemoryFeatureStore


class TestSelectBest:
    """Tests for select_best."""

    def test_empty(self):
        """No candidates selects nothing."""
        assert select_best(GenomicInterval("chr1", 1, 10), []) is None

    def test_greatest_extent_wins(self, feature_factory):
        """The candidate with the greatest overlap extent is selected."""
        region = GenomicInterval("chr1", 1000, 2000)
        candidates = [
            feature_factory("left", 900, 1500),  # extent 1101
            feature_factory("right", 1500, 2300),  # extent 1301
            feature_factory("inner", 1200, 1300),  # extent 1001
        ]
        assert select_best(region, candidates).name == "right"

    def test_tie_goes_to_later_candidate(self, feature_factory):
        """Among equal extents the last candidate seen is selected."""
        region = GenomicInterval("chr1", 1000, 2000)
        candidates = [
            feature_factory("first", 1100, 1200),
            feature_factory("second", 1500, 1600),
            feature_factory("third", 1700, 1800),
        ]
        assert select_best(region, candidates).name == "third"


class TestFeatureResolver:
    """Tests for FeatureResolver."""

    def test_requires_types(self, memory_store):
        """An empty type list is rejected."""
        with pytest.raises(ValueError, match="feature type"):
            FeatureResolver(memory_store, [])

    def test_no_match(self, memory_store):
        """A region with no features resolves to nothing."""
        resolver = FeatureResolver(memory_store, ["gene"])
        resolution = resolver.resolve(GenomicInterval("chr1", 6000, 6500))
        assert resolution == NO_RESOLUTION
        assert not resolution.found
        assert resolution.match_count == 0

    def test_single_match(self, memory_store):
        """One candidate is selected with a count of one."""
        resolver = FeatureResolver(memory_store, ["gene"])
        resolution = resolver.resolve(GenomicInterval("chr1", 1000, 2000))
        assert resolution.found
        assert resolution.feature.name == "geneA"
        assert resolution.match_count == 1

    def test_type_filter(self, memory_store):
        """Only requested types are candidates."""
        resolver = FeatureResolver(memory_store, ["repeat_region"])
        resolution = resolver.resolve(GenomicInterval("chr1", 3400, 3700))
        assert resolution.feature.name == "rep1"
        assert resolution.match_count == 1

    def test_multiple_matches_counted(self, memory_store):
        """All candidates are counted when one is chosen from many."""
        resolver = FeatureResolver(memory_store, ["gene", "repeat_region"])
        resolution = resolver.resolve(GenomicInterval("chr1", 3400, 3700))
        # geneB spans 3000..4000 (1001), rep1 spans 3400..3700 (301)
        assert resolution.feature.name == "geneB"
        assert resolution.match_count == 2

    def test_equal_extent_uses_store_order(self, feature_factory):
        """With equal extents the later feature in store order wins."""
        store = MemoryFeatureStore(
            [
                feature_factory("late", 1500, 1600),
                feature_factory("early", 1100, 1200),
            ]
        )
        resolver = FeatureResolver(store, ["gene"])
        resolution = resolver.resolve(GenomicInterval("chr1", 1000, 2000))
        # Store order is by start, so "late" comes after "early"
        assert resolution.feature.name == "late"
        assert resolution.match_count == 2

    def test_source_qualified_type(self, memory_store):
        """type:source requests match the source too."""
        region = GenomicInterval("chr1", 3400, 3700)
        assert FeatureResolver(memory_store, ["repeat_region:rmsk"]).resolve(region).found
        assert not FeatureResolver(memory_store, ["repeat_region:dfam"]).resolve(region).found


class TestResolution:
    """Tests for Resolution."""

    def test_found(self, feature_factory):
        assert Resolution(feature_factory("g", 1, 10), 1).found
        assert not Resolution(None).found
