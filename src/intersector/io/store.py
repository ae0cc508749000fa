"""Annotation feature stores.

This module provides the feature store used to look up annotated
features overlapping a search region. The engine only depends on the
FeatureStore protocol; two implementations are provided:

- MemoryFeatureStore: features held in memory with a per-sequence
  sorted index
- GFF3FeatureStore: a MemoryFeatureStore loaded from GFF3 files

Features:
    - Type-filtered overlap queries (``type`` or ``type:source``)
    - Lookup of named features by ID, Name, or Alias
    - Chromosome lengths from ``##sequence-region`` pragmas

Example:
    >>> from intersector.io.store import GFF3FeatureStore
    >>> store = GFF3FeatureStore("annotation.gff3")
    >>> for feature in store.query("chr1", 1000, 2000, ["gene"]):
    ...     print(feature.name, feature.start, feature.end)
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from pathlib import Path
from typing import Any, Iterable, Iterator, Protocol, runtime_checkable

import attrs
import numpy as np

from intersector.core.intervals import GenomicInterval
from intersector.io.common import open_text, parse_strand

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

# GFF3 column indices
COL_SEQID = 0
COL_SOURCE = 1
COL_TYPE = 2
COL_START = 3
COL_END = 4
COL_SCORE = 5
COL_STRAND = 6
COL_PHASE = 7
COL_ATTRIBUTES = 8

# Feature types describing a whole sequence, used for chromosome lengths
SEQUENCE_TYPES = {"region", "chromosome", "contig", "scaffold", "supercontig"}

# Attributes that name a feature for lookups
NAME_ATTRIBUTES = ("ID", "Name", "Alias")


# =============================================================================
# Data Models
# =============================================================================


@attrs.define(slots=True, frozen=True)
class Feature:
    """An annotated feature owned by a feature store.

    Attributes:
        feature_id: Unique feature identifier.
        name: Display name.
        type: Feature type (GFF3 column 3).
        source: Annotation source (GFF3 column 2).
        seqid: Scaffold/chromosome name.
        start: Start position (1-based, inclusive).
        end: End position (1-based, inclusive).
        strand: Strand (1, -1, or 0).
        attributes: Additional attributes from GFF3.
    """

    feature_id: str
    name: str
    type: str
    seqid: str
    start: int
    end: int
    strand: int = 0
    source: str = "."
    attributes: dict[str, str] = attrs.field(factory=dict, eq=False, hash=False)

    @property
    def interval(self) -> GenomicInterval:
        """Get the feature coordinates as a GenomicInterval."""
        return GenomicInterval(self.seqid, self.start, self.end, self.strand)

    @property
    def length(self) -> int:
        """Feature length in base pairs."""
        return self.end - self.start + 1


@runtime_checkable
class FeatureStore(Protocol):
    """Random-access store of annotated features."""

    def query(
        self,
        seqid: str,
        start: int,
        end: int,
        types: Iterable[str],
    ) -> list[Feature]:
        """Return features of the given types overlapping a region."""
        ...

    def lengths(self) -> dict[str, int]:
        """Return chromosome lengths keyed by seqid."""
        ...

    def get_feature(self, name: str, feature_type: str | None = None) -> Feature | None:
        """Return the feature with the given name, ID, or alias."""
        ...

    def feature_types(self) -> dict[str, int]:
        """Return feature counts keyed by ``type:source``."""
        ...


# =============================================================================
# Type Matching
# =============================================================================


def _parse_type(type_str: str) -> tuple[str, str | None]:
    """Split ``type`` or ``type:source`` into lowercase parts."""
    if ":" in type_str:
        ftype, source = type_str.split(":", 1)
        return ftype.strip().lower(), source.strip().lower()
    return type_str.strip().lower(), None


def type_matches(feature: Feature, requested: Iterable[tuple[str, str | None]]) -> bool:
    """Check if a feature matches any of the parsed type requests.

    Args:
        feature: Feature to test.
        requested: Parsed (type, source) tuples. A source of None matches
            any source.

    Returns:
        True if the feature matches.
    """
    ftype = feature.type.lower()
    source = feature.source.lower()
    for req_type, req_source in requested:
        if ftype == req_type and (req_source is None or source == req_source):
            return True
    return False


# =============================================================================
# Attribute Parsing
# =============================================================================


def parse_attributes(attr_string: str) -> dict[str, str]:
    """Parse GFF3 attribute string into dictionary.

    Args:
        attr_string: Semicolon-separated key=value pairs.

    Returns:
        Dictionary of attribute key-value pairs.
    """
    attributes: dict[str, str] = {}
    if not attr_string or attr_string == ".":
        return attributes

    for item in attr_string.split(";"):
        item = item.strip()
        if not item or "=" not in item:
            continue

        key, value = item.split("=", 1)
        value = value.replace("%3B", ";").replace("%3D", "=").replace("%26", "&")
        value = value.replace("%2C", ",").replace("%09", "\t").replace("%25", "%")
        attributes[key] = value

    return attributes


# =============================================================================
# In-memory Store
# =============================================================================


class _SeqIndex:
    """Sorted per-sequence index of features."""

    __slots__ = ("features", "starts", "ends")

    def __init__(self, features: list[Feature]) -> None:
        # Stable sort keeps file order among features sharing a start
        self.features = sorted(features, key=lambda f: f.start)
        self.starts = np.fromiter((f.start for f in self.features), dtype=np.int64)
        self.ends = np.fromiter((f.end for f in self.features), dtype=np.int64)

    def overlapping(self, start: int, end: int) -> Iterator[Feature]:
        """Yield features overlapping [start, end] in index order."""
        upper = int(np.searchsorted(self.starts, end, side="right"))
        if upper == 0:
            return
        hits = np.nonzero(self.ends[:upper] >= start)[0]
        for i in hits:
            yield self.features[i]


class MemoryFeatureStore:
    """Feature store holding all features in memory.

    Queries return features in the store's natural iteration order:
    ascending start position, then insertion order.

    Attributes:
        n_features: Number of features in the store.

    Example:
        >>> store = MemoryFeatureStore([Feature("g1", "g1", "gene", "chr1", 10, 90, 1)])
        >>> [f.name for f in store.query("chr1", 50, 60, ["gene"])]
        ['g1']
    """

    def __init__(
        self,
        features: Iterable[Feature] = (),
        lengths: dict[str, int] | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            features: Features to index.
            lengths: Chromosome lengths keyed by seqid.
        """
        self._features: list[Feature] = []
        self._lengths: dict[str, int] = dict(lengths or {})
        self._index: dict[str, _SeqIndex] | None = None
        self._names: dict[str, list[Feature]] = defaultdict(list)

        for feature in features:
            self.add_feature(feature)

    def add_feature(self, feature: Feature) -> None:
        """Add a feature to the store.

        Args:
            feature: Feature to add.
        """
        self._features.append(feature)
        self._index = None

        keys = {feature.feature_id, feature.name}
        alias = feature.attributes.get("Alias")
        if alias:
            keys.update(a for a in alias.split(",") if a)
        for key in keys:
            self._names[key].append(feature)

    def _ensure_indexed(self) -> dict[str, _SeqIndex]:
        """Build the per-sequence index if needed."""
        if self._index is None:
            by_seqid: dict[str, list[Feature]] = defaultdict(list)
            for feature in self._features:
                by_seqid[feature.seqid].append(feature)
            self._index = {seqid: _SeqIndex(feats) for seqid, feats in by_seqid.items()}
            logger.debug(
                f"Indexed {len(self._features)} features on {len(self._index)} sequences"
            )
        return self._index

    def query(
        self,
        seqid: str,
        start: int,
        end: int,
        types: Iterable[str],
    ) -> list[Feature]:
        """Get features of the requested types overlapping a region.

        Args:
            seqid: Scaffold name.
            start: Start position (1-based, inclusive).
            end: End position (1-based, inclusive).
            types: Feature types as ``type`` or ``type:source``.

        Returns:
            Overlapping features in store iteration order. An inverted
            region returns an empty list.
        """
        requested = [_parse_type(t) for t in types]
        index = self._ensure_indexed().get(seqid)
        if index is None or start > end:
            return []
        return [f for f in index.overlapping(start, end) if type_matches(f, requested)]

    def lengths(self) -> dict[str, int]:
        """Return chromosome lengths keyed by seqid."""
        return dict(self._lengths)

    def set_lengths(self, lengths: dict[str, int]) -> None:
        """Replace or add chromosome lengths.

        Args:
            lengths: Chromosome lengths keyed by seqid.
        """
        self._lengths.update(lengths)

    def get_feature(self, name: str, feature_type: str | None = None) -> Feature | None:
        """Look up a feature by ID, Name, or Alias.

        Args:
            name: Feature name or identifier.
            feature_type: Optional ``type`` or ``type:source`` restriction.

        Returns:
            The first matching feature, or None.
        """
        candidates = self._names.get(name, [])
        if feature_type:
            requested = [_parse_type(feature_type)]
            candidates = [f for f in candidates if type_matches(f, requested)]
        if not candidates:
            return None
        if len(candidates) > 1:
            logger.debug(f"{len(candidates)} features named '{name}', using the first")
        return candidates[0]

    def feature_types(self) -> dict[str, int]:
        """Count features by ``type:source``.

        Returns:
            Mapping of ``type:source`` to feature count, sorted by key.
        """
        counts = Counter(f"{f.type}:{f.source}" for f in self._features)
        return dict(sorted(counts.items()))

    def has_type(self, type_str: str) -> bool:
        """Check if any feature matches a ``type`` or ``type:source`` string."""
        requested = [_parse_type(type_str)]
        return any(type_matches(f, requested) for f in self._features)

    def __iter__(self) -> Iterator[Feature]:
        return iter(self._features)

    def __len__(self) -> int:
        return len(self._features)

    @property
    def n_features(self) -> int:
        """Number of features in the store."""
        return len(self._features)


# =============================================================================
# GFF3 Store
# =============================================================================


class GFF3FeatureStore(MemoryFeatureStore):
    """Feature store loaded from one or more GFF3 files.

    Every feature line is kept regardless of type, so any type present in
    the files can be queried. Files may be gzip compressed.

    Attributes:
        paths: Paths to the loaded GFF3 files.

    Example:
        >>> store = GFF3FeatureStore(["genes.gff3", "repeats.gff3.gz"])
        >>> store.feature_types()
        {'gene:ensembl': 120, 'repeat_region:rmsk': 4031}
    """

    def __init__(self, gff_paths: Path | str | Iterable[Path | str]) -> None:
        """Initialize the store.

        Args:
            gff_paths: Path or paths to GFF3 files.

        Raises:
            FileNotFoundError: If a file doesn't exist.
        """
        super().__init__()
        if isinstance(gff_paths, (str, Path)):
            gff_paths = [gff_paths]
        self.paths = [Path(p) for p in gff_paths]

        for path in self.paths:
            if not path.exists():
                raise FileNotFoundError(f"GFF3 file not found: {path}")

        for path in self.paths:
            self._load(path)

    def _parse_line(self, line: str) -> dict[str, Any] | None:
        """Parse a single GFF3 feature line.

        Args:
            line: Raw GFF3 line.

        Returns:
            Parsed feature dictionary or None for comments/empty.
        """
        line = line.rstrip("\r\n")
        if not line.strip() or line.startswith("#"):
            return None

        parts = line.split("\t")
        if len(parts) < 9:
            logger.warning(f"Malformed GFF3 line (expected 9 columns): {line[:50]}...")
            return None

        try:
            return {
                "seqid": parts[COL_SEQID],
                "source": parts[COL_SOURCE],
                "type": parts[COL_TYPE],
                "start": int(parts[COL_START]),
                "end": int(parts[COL_END]),
                "strand": parse_strand(parts[COL_STRAND]),
                "attributes": parse_attributes(parts[COL_ATTRIBUTES]),
            }
        except ValueError as e:
            logger.warning(f"Error parsing GFF3 line: {e}")
            return None

    def _parse_pragma(self, line: str) -> None:
        """Record chromosome lengths from ``##sequence-region`` pragmas."""
        fields = line.split()
        if len(fields) == 4 and fields[0] == "##sequence-region":
            try:
                self._lengths[fields[1]] = int(fields[3])
            except ValueError:
                logger.warning(f"Malformed sequence-region pragma: {line.strip()}")

    def _load(self, path: Path) -> None:
        """Load all features from a GFF3 file."""
        n_before = len(self)
        with open_text(path) as f:
            for line in f:
                if line.startswith("##FASTA"):
                    break
                if line.startswith("##"):
                    self._parse_pragma(line)
                    continue

                record = self._parse_line(line)
                if record is None:
                    continue

                attributes = record["attributes"]
                feature_id = attributes.get("ID") or attributes.get("Name")
                if not feature_id:
                    feature_id = f"{record['type']}_{len(self) + 1}"
                name = attributes.get("Name") or feature_id

                feature = Feature(
                    feature_id=feature_id,
                    name=name,
                    type=record["type"],
                    seqid=record["seqid"],
                    start=record["start"],
                    end=record["end"],
                    strand=record["strand"],
                    source=record["source"],
                    attributes=attributes,
                )
                self.add_feature(feature)

                if feature.type.lower() in SEQUENCE_TYPES:
                    known = self._lengths.get(feature.seqid, 0)
                    self._lengths[feature.seqid] = max(known, feature.end)

        logger.info(f"Loaded {len(self) - n_before} features from {path.name}")
