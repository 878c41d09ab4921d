from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, NoReturn, Optional

import typer

from cli.render import render_report
from logging_config import configure_logging
from models.errors import PipelineError
from models.report import persist_report
from services.pipeline import Pipeline, build_default_pipeline

logger = logging.getLogger(__name__)


@dataclass
class CLIState:
    pipeline: Pipeline


app = typer.Typer(
    help="Group raw location records by id and write one sorted file per id.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


def _fail(exc: Exception) -> NoReturn:
    logger.debug("Run failed", exc_info=exc)
    typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-w",
        min=1,
        help="Worker threads per phase (defaults to CLEAN_TX_WORKER_COUNT env or 4).",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to LOG_LEVEL env or INFO).",
    ),
) -> None:
    """Entry point for the CLI."""
    configure_logging(log_level.upper() if log_level else None)
    ctx.obj = CLIState(pipeline=build_default_pipeline(workers))


@app.command("run")
def run_command(
    ctx: typer.Context,
    input_dirs: List[Path] = typer.Option(
        ...,
        "--input-dir",
        "-i",
        help="Input root to scan recursively. Repeat for several roots.",
    ),
    output_dir: Path = typer.Option(
        ...,
        "--output-dir",
        "-o",
        file_okay=False,
        help="Directory receiving one {id}.txt file per identifier.",
    ),
    report_path: Optional[Path] = typer.Option(
        None,
        "--report",
        dir_okay=False,
        help="Also write the run summary as JSON to this path.",
    ),
) -> None:
    """Clean, group and sort every input root into the output directory."""
    state = _get_state(ctx)
    try:
        report = state.pipeline.run(input_dirs, output_dir)
        if report_path is not None:
            persist_report(report, report_path)
    except (PipelineError, OSError) as exc:
        _fail(exc)
    render_report(report)


@app.command("check")
def check_command(
    ctx: typer.Context,
    input_dirs: List[Path] = typer.Option(
        ...,
        "--input-dir",
        "-i",
        help="Input root to scan recursively. Repeat for several roots.",
    ),
) -> None:
    """Parse every input root and report counts without writing output."""
    state = _get_state(ctx)
    try:
        report = state.pipeline.check(input_dirs)
    except PipelineError as exc:
        _fail(exc)
    render_report(report)
