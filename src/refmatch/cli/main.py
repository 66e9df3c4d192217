"""Command-line interface for refmatch.

Provides CLI commands for finding candidate duplicate references.
"""

import importlib.metadata
import sys
from pathlib import Path

import click

__all__ = ["cli"]

try:
    __version__ = importlib.metadata.version("refmatch")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.1.0"  # Fallback for development


@click.group()
@click.version_option(version=__version__, prog_name="refmatch")
def cli() -> None:
    """Candidate duplicate detection for bibliographic references.

    Use 'refmatch COMMAND --help' for command-specific help.
    """


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    required=True,
    help="Output JSONL file for matches",
)
@click.option(
    "--threshold",
    type=click.FloatRange(0.0, 1.0),
    default=0.86,
    show_default=True,
    help="Minimum title similarity for a title/year match",
)
@click.option(
    "--year-tolerance",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Maximum publication-year difference for a title/year match",
)
@click.option(
    "--require-year/--no-require-year",
    default=True,
    show_default=True,
    help="Exclude undated references from title comparison",
)
@click.option(
    "--spelling/--no-spelling",
    default=True,
    show_default=True,
    help="Normalize British spellings to American before comparing titles",
)
@click.option(
    "--blockers",
    type=str,
    default="doi,pmid",
    help="Comma-separated identifier passes, empty for none (default: doi,pmid)",
)
@click.option(
    "--events",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write a JSONL audit log of the run to this path",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
def find(
    input_path: str,
    output: str,
    threshold: float,
    year_tolerance: int,
    require_year: bool,
    spelling: bool,
    blockers: str,
    events: str | None,
    verbose: bool,
) -> None:
    """Find candidate duplicate pairs in INPUT_PATH.

    INPUT_PATH is a JSONL reference snapshot: one object per line with
    'id' and optional 'title', 'year', 'doi' and 'pmid'.

    Matches are written to OUTPUT sorted by (primary_id, duplicate_id),
    each with its reasons and best title similarity.

    Examples
    --------
        refmatch find library.jsonl -o matches.jsonl
        refmatch find library.jsonl -o matches.jsonl --year-tolerance 1
        refmatch find library.jsonl -o matches.jsonl --blockers pmid
        refmatch find library.jsonl -o m.jsonl --threshold 0.9 --events run.jsonl
    """
    from refmatch.api import read_references_jsonl, write_matches_jsonl
    from refmatch.audit import AuditLogger
    from refmatch.engine import DeduplicationOptions, run_matching

    if verbose:
        click.echo(f"Reading: {input_path}", err=True)
        click.echo(f"  threshold: {threshold}", err=True)
        click.echo(f"  year tolerance: {year_tolerance}", err=True)
        click.echo(f"  require year: {require_year}", err=True)
        click.echo(f"  spelling normalization: {spelling}", err=True)
        click.echo(f"  blockers: {blockers}", err=True)

    logger = None
    try:
        blocker_list = [b.strip() for b in blockers.split(",") if b.strip()]

        options = DeduplicationOptions(
            title_similarity_threshold=threshold,
            require_year_match=require_year,
            year_tolerance=year_tolerance,
            normalize_spelling=spelling,
            identifier_blockers=tuple(blocker_list),
        )
        references = read_references_jsonl(input_path)

        if verbose:
            click.echo(f"Loaded {len(references)} references", err=True)

        if events:
            logger = AuditLogger(Path(events))

        result = run_matching(references, options, logger=logger)
        write_matches_jsonl(result.matches, output)

        if verbose:
            click.echo("\nMatches per reason:", err=True)
            for reason, count in result.reason_counts.items():
                click.echo(f"  {reason}: {count}", err=True)

        click.secho(
            f"✓ Found {result.total_matches} candidate pairs among "
            f"{result.total_references} references; wrote {output}",
            fg="green",
        )

    except Exception as e:
        click.secho(f"✗ Error: {e}", fg="red", err=True)
        if verbose:
            import traceback

            click.echo(traceback.format_exc(), err=True)
        sys.exit(1)
    finally:
        if logger is not None:
            logger.close()


if __name__ == "__main__":
    cli()
