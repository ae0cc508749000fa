"""Chromosome lengths from a genome FASTA.

Annotation databases do not always declare sequence lengths, and
coordinate-based search regions are clamped to the end of their
chromosome only when the length is known. This module reads the
lengths from the FASTA index (built by pyfaidx on first use) so they
can be handed to a feature store.

Example:
    >>> from intersector.io.fasta import GenomeAccessor
    >>> with GenomeAccessor("genome.fa") as genome:
    ...     store.set_lengths(genome.lengths())
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pyfaidx

logger = logging.getLogger(__name__)


class GenomeAccessor:
    """Sequence names and lengths of an indexed FASTA.

    Attributes:
        path: FASTA path.
        index_path: The ``.fai`` index beside the FASTA.
    """

    def __init__(self, fasta_path: Path | str) -> None:
        """Open a FASTA and read its sequence lengths.

        Args:
            fasta_path: FASTA path. A missing ``.fai`` index is created.

        Raises:
            FileNotFoundError: If the FASTA does not exist.
        """
        self.path = Path(fasta_path)
        if not self.path.is_file():
            raise FileNotFoundError(f"FASTA file not found: {self.path}")
        self.index_path = self.path.with_name(self.path.name + ".fai")

        # An existing index is used as-is
        self._fasta: pyfaidx.Fasta | None = pyfaidx.Fasta(str(self.path), rebuild=False)
        self._lengths = {name: len(record) for name, record in self._fasta.records.items()}

        logger.info(
            f"Read {len(self._lengths)} sequence lengths "
            f"({self.total_length:,} bp) from {self.path.name}"
        )

    def lengths(self) -> dict[str, int]:
        """Sequence lengths keyed by seqid, in FASTA order."""
        return dict(self._lengths)

    def length(self, seqid: str) -> int | None:
        """Length of one sequence, or None if the FASTA lacks it."""
        return self._lengths.get(seqid)

    @property
    def total_length(self) -> int:
        return sum(self._lengths.values())

    def __contains__(self, seqid: object) -> bool:
        return seqid in self._lengths

    def __len__(self) -> int:
        return len(self._lengths)

    def __enter__(self) -> GenomeAccessor:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Release the underlying file handle; lengths stay available."""
        if self._fasta is None:
            return
        self._fasta.close()
        self._fasta = None
