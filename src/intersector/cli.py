"""Command-line interface for Intersector.

This module provides the main entry point for the intersector CLI tool.
It uses Click to define commands and Rich for console output.

Commands:
    intersect: Find target features intersecting each reference feature
    types: List the feature types available in a feature store

Example:
    $ intersector --help
    $ intersector intersect -i peaks.bed -d genes.gff3 -f gene -o peaks_genes.txt
    $ intersector intersect -i genes.txt -d annotation.gff3 -f repeat_region \\
        --start -200 --stop 0 --pos 5
    $ intersector types -d annotation.gff3
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import attrs
import click
from rich.console import Console
from rich.table import Table

from intersector import __version__

# Initialize rich console for pretty output
console = Console()


# =============================================================================
# Helpers
# =============================================================================


def parse_selection(text: str, n_choices: int) -> list[int]:
    """Parse a numbered selection such as ``1,3-4``.

    Args:
        text: Comma-delimited numbers and ranges (1-based).
        n_choices: Number of available choices.

    Returns:
        Selected zero-based indices in the order given, without duplicates.

    Raises:
        ValueError: If a number is malformed or out of range.
    """
    selected: list[int] = []
    for item in text.replace(" ", "").split(","):
        if not item:
            continue
        if "-" in item:
            first, _, last = item.partition("-")
            numbers = range(int(first), int(last) + 1)
        else:
            numbers = range(int(item), int(item) + 1)
        for number in numbers:
            if not 1 <= number <= n_choices:
                raise ValueError(f"Selection {number} is out of range 1-{n_choices}")
            if number - 1 not in selected:
                selected.append(number - 1)
    return selected


def stdin_is_interactive() -> bool:
    """Whether the user can be prompted on standard input."""
    return sys.stdin.isatty()


def request_feature_types(available: list[str]) -> list[str]:
    """Interactively ask the user to choose feature types.

    Args:
        available: Available ``type:source`` strings.

    Returns:
        Chosen feature types.
    """
    console.print("[bold]Available feature types:[/bold]")
    for i, type_str in enumerate(available, 1):
        console.print(f"  {i:>3}  {type_str}")

    text = click.prompt(
        "Enter the number(s) of the intersecting feature(s) to search.\n"
        "Enter as comma delimited list and/or range",
        type=str,
    )
    try:
        return [available[i] for i in parse_selection(text, len(available))]
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="feature selection") from e


def verify_feature_types(store, requested: list[str]) -> list[str]:
    """Keep only the requested feature types present in the store.

    Args:
        store: Feature store.
        requested: Requested ``type`` or ``type:source`` strings.

    Returns:
        Requested types found in the store, in the order given.
    """
    valid = []
    for type_str in requested:
        if store.has_type(type_str):
            valid.append(type_str)
        else:
            console.print(f"[yellow]Warning:[/yellow] no '{type_str}' features in database")
    return valid


# =============================================================================
# Main group
# =============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="intersector")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output.")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    help="Also write a debug log to this file.",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, quiet: bool, log_file: Optional[Path]) -> None:
    """Intersector: find annotated features intersecting reference regions.

    Reference features are given either as genomic coordinates (BED, GFF3,
    or a table with chromosome/start/stop columns) or as named features
    looked up in the annotation database.
    """
    from intersector.utils.logging import setup_logging, verbosity_from_flags

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    setup_logging(verbosity_from_flags(verbose, quiet), log_file=log_file)


# =============================================================================
# intersect command
# =============================================================================


@main.command()
@click.option(
    "-i",
    "--in",
    "infile",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Input reference file: tab-delimited table, BED, or GFF3 (optionally gzipped).",
)
@click.option(
    "-o",
    "--out",
    "outfile",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file. Default is to overwrite the input file.",
)
@click.option(
    "-d",
    "--db",
    "database",
    type=str,
    multiple=True,
    help="Annotation database GFF3 file(s). Comma-separated or repeated.",
)
@click.option(
    "-g",
    "--genome",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Genome FASTA used for chromosome lengths.",
)
@click.option(
    "-f",
    "--feature",
    "features",
    type=str,
    multiple=True,
    help="Target feature type(s) as type or type:source. Comma-separated or repeated.",
)
@click.option(
    "-b",
    "--start",
    "--begin",
    "start_offset",
    type=int,
    help="Relative start of the search region from the --pos position.",
)
@click.option(
    "-e",
    "--stop",
    "--end",
    "stop_offset",
    type=int,
    help="Relative stop of the search region from the --pos position.",
)
@click.option(
    "-p",
    "--pos",
    "anchor",
    type=click.Choice(["5", "m", "3"]),
    help="Position from which --start and --stop are measured.  [default: 5]",
)
@click.option(
    "-x",
    "--extend",
    type=int,
    help="Extend the search region by this many bp on both sides.",
)
@click.option(
    "-r",
    "--ref",
    "reference_point",
    type=click.Choice(["start", "mid"]),
    help="Reference point for measuring distance.  [default: start]",
)
@click.option("-z", "--gz/--no-gz", "gz", default=False, help="Compress the output file.")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="TOML configuration file. Command-line options take precedence.",
)
@click.pass_context
def intersect(
    ctx: click.Context,
    infile: Path,
    outfile: Optional[Path],
    database: tuple[str, ...],
    genome: Optional[Path],
    features: tuple[str, ...],
    start_offset: Optional[int],
    stop_offset: Optional[int],
    anchor: Optional[str],
    extend: Optional[int],
    reference_point: Optional[str],
    gz: bool,
    config_path: Optional[Path],
) -> None:
    """Find target features intersecting each reference feature.

    For every reference row a search region is built, the database is
    searched for target features of the requested types, and six columns
    are appended: the number of targets found, and the name, type, strand,
    distance, and overlap of the target with the greatest overlap.

    \b
    Search region:
    - default: the whole reference feature
    - --extend N: N bp added on both sides
    - --start A --stop B: A..B relative to the --pos position (5' end,
      midpoint, or 3' end, strand aware)

    \b
    Examples:
        # Genes overlapping peaks
        $ intersector intersect -i peaks.bed -d genes.gff3 -f gene -o out.txt

        # Repeats within 200 bp upstream of named genes
        $ intersector intersect -i genes.txt -d annotation.gff3 -f repeat_region \\
            --start -200 --stop 0 --pos 5
    """
    import logging

    from intersector.config import Config, split_comma_list
    from intersector.core.processor import RowProcessor, Summary
    from intersector.io.fasta import GenomeAccessor
    from intersector.io.store import GFF3FeatureStore
    from intersector.io.table import ReferenceTable
    from intersector.utils.logging import ProgressLogger, Timer

    verbose = ctx.obj.get("verbose", False)
    quiet = ctx.obj.get("quiet", False)
    logger = logging.getLogger("intersector.cli")

    try:
        config = Config.load(config_path)

        # Command-line options override the configuration file
        overrides = {
            "feature_types": split_comma_list(features) or None,
            "start_offset": start_offset,
            "stop_offset": stop_offset,
            "anchor": anchor,
            "extend": extend,
            "reference_point": reference_point,
        }
        settings = attrs.evolve(
            config.intersect,
            **{k: v for k, v in overrides.items() if v is not None},
        )

        table = ReferenceTable.read(infile)
        if not quiet:
            console.print(f"[blue]Loaded:[/blue] {len(table):,} {table.kind.value} features from {infile}")

        db_paths = split_comma_list(database) or config.database
        if not db_paths and table.database:
            db_paths = [table.database]
        if not db_paths:
            console.print("[red]Error:[/red] No database defined! Use --db")
            raise SystemExit(1)
        if database and table.database and table.database not in db_paths:
            console.print(
                f"[yellow]Warning:[/yellow] database '{table.database}' in the file "
                f"metadata is overridden by --db"
            )

        store = GFF3FeatureStore(db_paths)

        genome_path = genome or config.genome
        if genome_path:
            with GenomeAccessor(genome_path) as accessor:
                store.set_lengths(accessor.lengths())

        requested = settings.feature_types
        if not requested:
            if not stdin_is_interactive():
                console.print("[red]Error:[/red] No feature types given! Use --feature")
                raise SystemExit(1)
            requested = request_feature_types(list(store.feature_types()))

        settings.feature_types = verify_feature_types(store, requested)
        if not settings.feature_types:
            console.print("[red]Error:[/red] No valid feature types to search")
            raise SystemExit(1)

        if not quiet:
            console.print(
                f"[blue]Searching for intersecting[/blue] "
                f"{', '.join(settings.feature_types)} features..."
            )

        processor = RowProcessor(settings, store, table.kind)
        summary = Summary()
        progress = ProgressLogger(logger, total=len(table))

        with Timer("Intersection", logger):
            results = list(processor.process(table.iter_records(), summary, progress))
        progress.finish()

        table.append_results(results, settings.column_metadata())
        written = table.write(outfile or infile, gz=gz)

        if not quiet:
            console.print(f"[green]Wrote data file:[/green] {written}")
            for line in summary.report_lines():
                console.print(f"  {line}")

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        if verbose:
            import traceback

            traceback.print_exc()
        raise SystemExit(1)


# =============================================================================
# types command
# =============================================================================


@main.command("types")
@click.option(
    "-d",
    "--db",
    "database",
    type=str,
    multiple=True,
    required=True,
    help="Annotation database GFF3 file(s). Comma-separated or repeated.",
)
@click.pass_context
def list_types(ctx: click.Context, database: tuple[str, ...]) -> None:
    """List the feature types in an annotation database.

    Types are shown as type:source together with their feature counts;
    either form can be passed to 'intersector intersect --feature'.
    """
    from intersector.config import split_comma_list
    from intersector.io.store import GFF3FeatureStore

    try:
        store = GFF3FeatureStore(split_comma_list(database))
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    table = Table(title=f"Feature types ({store.n_features:,} features)")
    table.add_column("#", justify="right")
    table.add_column("Type")
    table.add_column("Count", justify="right")
    for i, (type_str, count) in enumerate(store.feature_types().items(), 1):
        table.add_row(str(i), type_str, f"{count:,}")
    console.print(table)


if __name__ == "__main__":
    main()
