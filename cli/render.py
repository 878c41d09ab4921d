from __future__ import annotations

from typing import Any, Iterable

import typer

from models.report import RunReport


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_report(report: RunReport) -> None:
    echo_heading("Run Summary")
    echo_key_values(
        [
            ("input_roots", ", ".join(report.input_roots)),
            ("output_dir", report.output_dir or "-"),
            ("files_scanned", report.files_scanned),
            ("lines_read", report.lines_read),
            ("records_accepted", report.records_accepted),
            ("lines_rejected", report.rejected_total),
            ("group_count", report.group_count),
            ("groups_written", report.groups_written),
            ("processing_ms", report.processing_ms),
        ]
    )

    typer.echo()
    echo_heading("Rejected Lines")
    if report.rejected:
        for reason, count in report.rejected.items():
            typer.echo(f"  - {reason.value}: {count}")
    else:
        typer.echo("No lines rejected.")
