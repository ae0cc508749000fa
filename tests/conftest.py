"""Pytest configuration and shared fixtures for Intersector tests.

This module contains fixtures that are shared across multiple test modules.
Fixtures are organized by category:

- Store fixtures: In-memory and GFF3-backed feature stores
- Reference fixtures: Reference tables in text, BED, and GFF3 formats
- Genome fixtures: Synthetic FASTA files
"""

import logging
from pathlib import Path

import pytest

from intersector.io.store import Feature, MemoryFeatureStore
from intersector.utils.logging import PACKAGE_LOGGER


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Remove handlers added by setup_logging after each test."""
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


# =============================================================================
# Store Fixtures
# =============================================================================


def make_feature(
    name: str,
    start: int,
    end: int,
    strand: int = 1,
    seqid: str = "chr1",
    type: str = "gene",
    source: str = "test",
) -> Feature:
    """Build a feature for tests, using the name as its ID."""
    return Feature(
        feature_id=name,
        name=name,
        type=type,
        seqid=seqid,
        start=start,
        end=end,
        strand=strand,
        source=source,
    )


@pytest.fixture
def feature_factory():
    """Return the make_feature helper."""
    return make_feature


@pytest.fixture
def memory_store() -> MemoryFeatureStore:
    """Small in-memory store with chromosome lengths.

    chr1 (10,000 bp):
    - geneA 1500-1800 (+)
    - geneB 3000-4000 (-)
    - rep1 repeat_region 3500-3600 (+)
    chr2 (5,000 bp):
    - geneC 100-400 (-)
    """
    return MemoryFeatureStore(
        [
            make_feature("geneA", 1500, 1800, 1),
            make_feature("geneB", 3000, 4000, -1),
            make_feature("rep1", 3500, 3600, 1, type="repeat_region", source="rmsk"),
            make_feature("geneC", 100, 400, -1, seqid="chr2"),
        ],
        lengths={"chr1": 10_000, "chr2": 5_000},
    )


GFF3_CONTENT = """\
##gff-version 3
##sequence-region chr1 1 10000
##sequence-region chr2 1 5000
chr1\ttest\tgene\t1500\t1800\t.\t+\t.\tID=gene1;Name=GENE1
chr1\ttest\tmRNA\t1500\t1800\t.\t+\t.\tID=mRNA1;Parent=gene1
chr1\ttest\tgene\t3000\t4000\t.\t-\t.\tID=gene2;Name=GENE2;Alias=G2,gene-two
chr1\trmsk\trepeat_region\t3500\t3600\t.\t+\t.\tID=rep1
chr2\ttest\tgene\t100\t400\t.\t-\t.\tID=gene3;Name=GENE3
"""


@pytest.fixture
def synthetic_gff3(tmp_path: Path) -> Path:
    """Create a synthetic GFF3 annotation database.

    Contains three genes, one mRNA, and one repeat on two chromosomes
    with declared sequence lengths.
    """
    gff_path = tmp_path / "annotation.gff3"
    gff_path.write_text(GFF3_CONTENT)
    return gff_path


# =============================================================================
# Reference Fixtures
# =============================================================================


@pytest.fixture
def coordinate_table(tmp_path: Path) -> Path:
    """Create a tab-delimited coordinate reference table.

    Row 1 overlaps gene1, row 2 overlaps gene2 and rep1, row 3 overlaps
    nothing.
    """
    path = tmp_path / "regions.txt"
    path.write_text(
        "Chromosome\tStart\tStop\tStrand\tLabel\n"
        "chr1\t1000\t2000\t+\tpeak1\n"
        "chr1\t3400\t3700\t-\tpeak2\n"
        "chr1\t6000\t6500\t.\tpeak3\n"
    )
    return path


@pytest.fixture
def named_table(tmp_path: Path) -> Path:
    """Create a named-feature reference table."""
    path = tmp_path / "genes.txt"
    path.write_text(
        "Name\tType\n"
        "GENE1\tgene\n"
        "GENE2\tgene\n"
        "MISSING\tgene\n"
    )
    return path


@pytest.fixture
def bed_file(tmp_path: Path) -> Path:
    """Create a BED6 reference file (0-based starts)."""
    path = tmp_path / "peaks.bed"
    path.write_text(
        "track name=peaks\n"
        "chr1\t999\t2000\tpeak1\t10\t+\n"
        "chr2\t49\t150\tpeak2\t5\t-\n"
    )
    return path


# =============================================================================
# Genome Fixtures
# =============================================================================


@pytest.fixture
def synthetic_fasta(tmp_path: Path) -> Path:
    """Create a synthetic FASTA file.

    - chr1: 1200 bp
    - chr2: 500 bp
    """
    fasta_path = tmp_path / "genome.fa"
    sequences = {"chr1": "ACGT" * 300, "chr2": "GATTACA" * 71 + "GAT"}

    with open(fasta_path, "w") as f:
        for seqid, seq in sequences.items():
            f.write(f">{seqid}\n")
            for i in range(0, len(seq), 60):
                f.write(seq[i : i + 60] + "\n")

    return fasta_path
