"""pgmgraph CLI — build a graph from sentences and print empirical probabilities."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from pgmgraph.client import PGM
from pgmgraph.ingest import DEMO_SENTENCES
from pgmgraph.models import VertexReport
from pgmgraph.probability import EmptyGraphError

logger = logging.getLogger("pgmgraph.cli")

_stride_option = click.option(
    "--stride",
    default=2,
    show_default=True,
    type=click.IntRange(min=1),
    help="Step between word pairs (2 = non-overlapping pairs, 1 = bigrams).",
)
_workers_option = click.option(
    "--workers",
    default=1,
    show_default=True,
    envvar="PGMGRAPH_WORKERS",
    type=click.IntRange(min=1),
    help="Threads used to ingest sentences.",
)
_json_option = click.option("--json", "as_json", is_flag=True, help="Print JSON instead of text.")


def _load_sentences(path: str) -> list[str]:
    lines = Path(path).read_text().splitlines()
    return [line for line in lines if line.strip()]


def _build(sentences: list, stride: int, workers: int) -> PGM:
    pgm = PGM()
    pgm.observe_all(sentences, stride=stride, workers=workers)
    return pgm


def _echo_report(pgm: PGM, word: str, as_json: bool) -> None:
    try:
        report = pgm.report(word)
    except EmptyGraphError as exc:
        raise click.ClickException(str(exc)) from exc
    if report is None:
        raise click.ClickException(f"Word {word!r} was never observed")
    if as_json:
        click.echo(report.model_dump_json(indent=2))
        return
    _echo_text_report(report)


def _echo_text_report(report: VertexReport) -> None:
    click.echo(f"probability of global {report.unique_name}: {report.probability}")
    for e in report.edges:
        click.echo(f"probability of global {e.unique_name}: {e.global_probability}")
        click.echo(
            f"probability of {e.target} coming after {e.source}: {e.transition_probability}"
        )


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    show_default=True,
    envvar="PGMGRAPH_LOG_LEVEL",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging verbosity (logs go to stderr).",
)
def cli(log_level: str) -> None:
    """pgmgraph CLI — count word pairs and estimate their probabilities."""
    # stdout carries the report; keep logs on stderr
    logging.basicConfig(
        stream=sys.stderr, level=log_level.upper(), format="%(levelname)s: %(message)s"
    )


@cli.command()
@click.option("--word", default="what", show_default=True, help="Word to report on.")
@_stride_option
@_json_option
def demo(word: str, stride: int, as_json: bool) -> None:
    """Ingest the built-in example sentences and report on one word."""
    pgm = _build(DEMO_SENTENCES, stride, workers=1)
    logger.info("Demo graph: %r", pgm)
    _echo_report(pgm, word, as_json)


@cli.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--word", required=True, help="Word to report on.")
@_stride_option
@_workers_option
@_json_option
def report(input_file: str, word: str, stride: int, workers: int, as_json: bool) -> None:
    """Ingest a text file (one sentence per line) and report on one word."""
    pgm = _build(_load_sentences(input_file), stride, workers)
    _echo_report(pgm, word.lower(), as_json)


@cli.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@_stride_option
@_workers_option
def stats(input_file: str, stride: int, workers: int) -> None:
    """Ingest a text file and show graph totals and validation results."""
    pgm = _build(_load_sentences(input_file), stride, workers)
    s = pgm.stats()
    if s.total_entity_count == 0:
        raise click.ClickException(f"No word pairs found in {input_file}")
    click.echo(f"Vertices: {s.vertex_count}  Edges: {s.edge_count}")
    click.echo(f"Entities: {int(s.total_entity_count)}")
    result = pgm.validate()
    if result.valid:
        click.echo("Graph is valid.")
    else:
        click.echo("Validation errors:")
        for err in result.errors:
            click.echo(f"  ERROR: {err}")
    for warn in result.warnings:
        click.echo(f"  WARNING: {warn}")


if __name__ == "__main__":
    cli()
