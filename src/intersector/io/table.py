"""Reference table reading and writing.

This module reads the reference features to be intersected and writes
them back with the result columns appended. Supported inputs:

- Tab-delimited text with a header row (optionally preceded by
  ``# key value`` metadata lines)
- BED (0-based starts are converted to 1-based)
- GFF3 (each feature line is a coordinate reference)

Any of these may be gzip compressed. The reference representation
(coordinates or named features) is detected once from the column
names.

Example:
    >>> from intersector.io.table import ReferenceTable
    >>> table = ReferenceTable.read("peaks.bed")
    >>> table.kind
    <ReferenceKind.COORDINATE: 'coordinate'>
    >>> for record in table.iter_records():
    ...     print(record.seqid, record.start, record.end)
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Iterator

from intersector.core.processor import RESULT_COLUMNS, ResultRow
from intersector.core.regions import ReferenceKind, ReferenceRecord, parse_region
from intersector.io.common import base_suffix, open_text, parse_strand

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

BED_COLUMNS = [
    "Chromosome",
    "Start",
    "End",
    "Name",
    "Score",
    "Strand",
    "thickStart",
    "thickEnd",
    "itemRGB",
    "blockCount",
    "blockSizes",
    "blockStarts",
]

GFF_COLUMNS = [
    "Chromosome",
    "Source",
    "Type",
    "Start",
    "Stop",
    "Score",
    "Strand",
    "Phase",
    "Group",
]

# Column name patterns, matched case-insensitively at the start of the name.
# A leading '#' on the name is tolerated.
COLUMN_PATTERNS = {
    "name": r"name|geneName|transcriptName|geneid|id|alias",
    "type": r"type|class|primary_tag",
    "id": r"primary_id",
    "seqid": r"chr|seq|ref|ref.?seq",
    "start": r"start|position|pos|txStart$",
    "stop": r"stop|end|txEnd",
    "strand": r"strand",
    "coordinate": r"coordinate",
}

# Column metadata written by a previous run; regenerated on output
COLUMN_META_RE = re.compile(r"^#\s*Column_\d+\s")

# Metadata key naming the default feature store
DATABASE_KEY = "database"

# Metadata key naming a table-wide feature type for named references
FEATURE_KEY = "feature"


# =============================================================================
# Column Detection
# =============================================================================


def find_column(columns: list[str], pattern: str) -> int | None:
    """Find the first column whose name matches a pattern.

    Args:
        columns: Column names.
        pattern: Regular expression matched at the start of the name.

    Returns:
        Column index, or None if no column matches.
    """
    regex = re.compile(rf"#?(?:{pattern})", re.IGNORECASE)
    for i, name in enumerate(columns):
        if regex.match(name):
            return i
    return None


def detect_columns(columns: list[str]) -> dict[str, int | None]:
    """Locate the identifying columns of a reference table.

    Args:
        columns: Column names.

    Returns:
        Mapping of role (name, type, id, seqid, start, stop, strand,
        coordinate) to column index or None.
    """
    return {role: find_column(columns, pattern) for role, pattern in COLUMN_PATTERNS.items()}


def detect_kind(indices: dict[str, int | None]) -> ReferenceKind:
    """Decide how the rows of a table identify their location.

    Coordinates take precedence over names when a table has both.

    Args:
        indices: Column roles from detect_columns.

    Returns:
        The reference kind.

    Raises:
        ValueError: If the table has neither coordinate nor name columns.
    """
    if indices["seqid"] is not None and indices["start"] is not None:
        return ReferenceKind.COORDINATE
    if indices["coordinate"] is not None:
        return ReferenceKind.COORDINATE
    if indices["id"] is not None or indices["name"] is not None:
        return ReferenceKind.NAMED
    raise ValueError(
        "Unable to identify feature information columns: "
        "no chromosome, start, stop, name, ID, and/or type columns"
    )


def _null_to_none(value: str) -> str | None:
    value = value.strip()
    return None if value in ("", ".") else value


# =============================================================================
# Reference Table
# =============================================================================


class ReferenceTable:
    """In-memory reference table with appendable result columns.

    Attributes:
        path: Source file path.
        columns: Column names.
        rows: Row values, one list of strings per row.
        metadata: ``# key value`` metadata lines keyed by lowercase key.
        kind: How rows identify their genomic location.
        interbase: Whether starts are 0-based (BED).

    Example:
        >>> table = ReferenceTable.read("genes.txt")
        >>> table.append_results(results)
        >>> table.write("genes_intersected.txt")
    """

    def __init__(
        self,
        columns: list[str],
        rows: list[list[str]],
        path: Path | str | None = None,
        metadata: dict[str, str] | None = None,
        comments: list[str] | None = None,
        interbase: bool = False,
    ) -> None:
        """Initialize the table.

        Args:
            columns: Column names.
            rows: Row values.
            path: Source file path.
            metadata: Metadata values keyed by lowercase key.
            comments: Raw comment lines to preserve on output.
            interbase: Whether starts are 0-based.

        Raises:
            ValueError: If the reference kind cannot be determined.
        """
        self.path = Path(path) if path is not None else None
        self.columns = list(columns)
        self.rows = rows
        self.metadata = dict(metadata or {})
        self.comments = list(comments or [])
        self.interbase = interbase
        self.column_metadata: dict[int, dict[str, str]] = {}

        self._indices = detect_columns(self.columns)
        self.kind = detect_kind(self._indices)

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    @classmethod
    def read(cls, path: Path | str) -> ReferenceTable:
        """Read a reference table from a file.

        Args:
            path: Path to a text table, BED, or GFF3 file (optionally .gz).

        Returns:
            Loaded ReferenceTable.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ValueError: If the file is empty or has no usable columns.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Input file not found: {path}")

        suffix = base_suffix(path)
        if suffix == ".bed":
            table = cls._read_positional(path, BED_COLUMNS, interbase=True)
        elif suffix in (".gff", ".gff3"):
            table = cls._read_positional(path, GFF_COLUMNS, interbase=False)
        else:
            table = cls._read_text(path)

        logger.info(f"Loaded {len(table):,} {table.kind.value} features from {path.name}")
        return table

    @classmethod
    def _read_text(cls, path: Path) -> ReferenceTable:
        """Read a tab-delimited table with a header row."""
        metadata: dict[str, str] = {}
        comments: list[str] = []
        columns: list[str] | None = None
        rows: list[list[str]] = []

        with open_text(path) as f:
            for raw in f:
                line = raw.rstrip("\r\n")
                if columns is None:
                    if not line.strip():
                        continue
                    if line.startswith("#") and "\t" not in line:
                        if COLUMN_META_RE.match(line):
                            continue
                        comments.append(line)
                        parts = line.lstrip("#").strip().split(None, 1)
                        if len(parts) == 2:
                            metadata[parts[0].lower()] = parts[1].strip()
                        continue
                    columns = line.split("\t")
                    continue
                if not line.strip() or line.startswith("#"):
                    continue
                rows.append(cls._fit_row(line.split("\t"), len(columns)))

        if columns is None:
            raise ValueError(f"No header row found in {path}")

        return cls(columns, rows, path=path, metadata=metadata, comments=comments)

    @classmethod
    def _read_positional(
        cls,
        path: Path,
        names: list[str],
        interbase: bool,
    ) -> ReferenceTable:
        """Read a headerless format with fixed column names."""
        rows: list[list[str]] = []
        width = 0

        with open_text(path) as f:
            for raw in f:
                line = raw.rstrip("\r\n")
                if not line.strip() or line.startswith(("#", "track", "browser")):
                    continue
                fields = line.split("\t")
                width = max(width, len(fields))
                rows.append(fields)

        if not rows:
            raise ValueError(f"No features found in {path}")

        columns = names[:width] + [f"Column_{i + 1}" for i in range(len(names), width)]
        rows = [cls._fit_row(r, len(columns)) for r in rows]
        return cls(columns, rows, path=path, interbase=interbase)

    @staticmethod
    def _fit_row(fields: list[str], width: int) -> list[str]:
        """Pad or truncate a row to the table width."""
        if len(fields) < width:
            return fields + [""] * (width - len(fields))
        return fields[:width]

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def database(self) -> str | None:
        """Feature store named in the table metadata, if any."""
        return self.metadata.get(DATABASE_KEY)

    def _value(self, row: list[str], role: str) -> str | None:
        index = self._indices[role]
        if index is None:
            return None
        return _null_to_none(row[index])

    def record(self, row_index: int) -> ReferenceRecord:
        """Build the reference record for a row.

        Args:
            row_index: Zero-based row index.

        Returns:
            ReferenceRecord. Coordinates that cannot be parsed are left
            unset so that the region cannot be established.
        """
        row = self.rows[row_index]
        strand = parse_strand(self._value(row, "strand"))

        if self.kind is ReferenceKind.NAMED:
            name = self._value(row, "id") or self._value(row, "name")
            feature_type = self._value(row, "type") or self.metadata.get(FEATURE_KEY)
            return ReferenceRecord(row_index, strand=strand, name=name, type=feature_type)

        if self._indices["seqid"] is None or self._indices["start"] is None:
            coordinate = self._value(row, "coordinate")
            try:
                interval = parse_region(coordinate or "", strand)
            except ValueError as e:
                logger.debug(f"Row {row_index + 1}: {e}")
                return ReferenceRecord(row_index, strand=strand)
            return ReferenceRecord(
                row_index, interval.seqid, interval.start, interval.end, strand
            )

        seqid = self._value(row, "seqid")
        try:
            start = int(self._value(row, "start") or "")
            stop = self._value(row, "stop")
            end = int(stop) if stop is not None else start
        except ValueError:
            logger.debug(f"Row {row_index + 1}: coordinates are not integers")
            return ReferenceRecord(row_index, seqid=seqid, strand=strand)

        if self.interbase:
            start += 1
        return ReferenceRecord(row_index, seqid, start, end, strand)

    def iter_records(self) -> Iterator[ReferenceRecord]:
        """Iterate over reference records in row order.

        Yields:
            ReferenceRecord objects.
        """
        for i in range(len(self.rows)):
            yield self.record(i)

    # -------------------------------------------------------------------------
    # Results
    # -------------------------------------------------------------------------

    def add_column(self, name: str, values: list[str], metadata: dict[str, str] | None = None) -> int:
        """Append a column.

        Args:
            name: Column name.
            values: One value per row.
            metadata: Optional metadata recorded for the column.

        Returns:
            Index of the new column.

        Raises:
            ValueError: If the number of values doesn't match the rows.
        """
        if len(values) != len(self.rows):
            raise ValueError(
                f"Column '{name}' has {len(values)} values for {len(self.rows)} rows"
            )
        index = len(self.columns)
        self.columns.append(name)
        for row, value in zip(self.rows, values):
            row.append(value)
        if metadata:
            self.column_metadata[index] = dict(metadata)
        return index

    def append_results(
        self,
        results: Iterable[ResultRow],
        column_metadata: dict[str, dict[str, str]] | None = None,
    ) -> None:
        """Append the six result columns.

        Args:
            results: One ResultRow per row, in row order.
            column_metadata: Optional metadata keyed by result column name.
        """
        values = [result.to_values() for result in results]
        column_metadata = column_metadata or {}
        for i, name in enumerate(RESULT_COLUMNS):
            self.add_column(name, [v[i] for v in values], column_metadata.get(name))

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------

    def write(self, output_path: Path | str, gz: bool = False) -> Path:
        """Write the table as tab-delimited text.

        BED and GFF3 inputs no longer match their format once columns are
        appended, so such output names get a ``.txt`` suffix.

        Args:
            output_path: Output file path.
            gz: Compress the output with gzip.

        Returns:
            Path actually written.
        """
        output_path = Path(output_path)
        if output_path.suffix.lower() == ".gz":
            output_path = output_path.with_suffix("")
            gz = True
        if output_path.suffix.lower() in (".bed", ".gff", ".gff3"):
            output_path = output_path.with_suffix(".txt")
        if gz:
            output_path = output_path.with_name(output_path.name + ".gz")

        with open_text(output_path, "w") as f:
            for comment in self.comments:
                f.write(comment + "\n")
            for index, meta in sorted(self.column_metadata.items()):
                fields = ";".join(
                    [f"name={self.columns[index]}"] + [f"{k}={v}" for k, v in meta.items()]
                )
                f.write(f"# Column_{index} {fields}\n")

            # Fields are written as read, without quoting or escaping
            f.write("\t".join(self.columns) + "\n")
            for row in self.rows:
                f.write("\t".join(row) + "\n")

        logger.info(f"Wrote {len(self.rows):,} rows to {output_path}")
        return output_path
