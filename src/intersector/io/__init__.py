"""Input/output handlers for Intersector.

This module provides readers and writers for the files Intersector
works with:

- GFF3: Annotation databases searched for target features
- Reference tables: Text tables, BED, and GFF3 reference lists
- FASTA: Chromosome lengths

Example:
    >>> from intersector.io import GFF3FeatureStore, ReferenceTable
    >>> store = GFF3FeatureStore("annotation.gff3")
    >>> table = ReferenceTable.read("peaks.bed")
"""

from intersector.io.store import Feature, FeatureStore, GFF3FeatureStore, MemoryFeatureStore
from intersector.io.table import ReferenceTable

__all__ = [
    "Feature",
    "FeatureStore",
    "GFF3FeatureStore",
    "MemoryFeatureStore",
    "ReferenceTable",
]
