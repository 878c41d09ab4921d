from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from cli.app import app
from services.pipeline import build_default_pipeline


@pytest.fixture()
def runner(monkeypatch) -> CliRunner:
    monkeypatch.setattr("cli.app.configure_logging", lambda level=None: None)
    build_default_pipeline.cache_clear()
    yield CliRunner()
    build_default_pipeline.cache_clear()


def _input_root(tmp_path: Path, *lines: str) -> Path:
    root = tmp_path / "in"
    root.mkdir()
    (root / "data.txt").write_text("".join(f"{line}\n" for line in lines))
    return root


def test_run_writes_group_files(runner: CliRunner, tmp_path: Path) -> None:
    root = _input_root(
        tmp_path,
        "7,x,y,20230101120000,12.5,45.5,1",
        "7,x,y,20230101110000,12.4,45.4,1",
        "7,x,y,20230101100000,12.3,45.3,0",
    )
    output_dir = tmp_path / "out"

    result = runner.invoke(app, ["--workers", "2", "run", "-i", str(root), "-o", str(output_dir)])

    assert result.exit_code == 0, result.output
    assert "Run Summary" in result.stdout
    assert "records_accepted: 2" in result.stdout
    assert "invalid_flag: 1" in result.stdout
    assert (output_dir / "7.txt").read_text() == (
        "7,2023-01-01 11:00:00,12.4,45.4\n7,2023-01-01 12:00:00,12.5,45.5\n"
    )


def test_run_persists_report(runner: CliRunner, tmp_path: Path) -> None:
    root = _input_root(tmp_path, "7,x,y,20230101120000,12.5,45.5,1")
    report_path = tmp_path / "reports" / "run.json"

    result = runner.invoke(
        app,
        ["run", "-i", str(root), "-o", str(tmp_path / "out"), "--report", str(report_path)],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(report_path.read_text())
    assert payload["records_accepted"] == 1
    assert payload["groups_written"] == 1
    assert payload["input_roots"] == [str(root)]


def test_run_exits_non_zero_on_parse_error(runner: CliRunner, tmp_path: Path) -> None:
    root = _input_root(tmp_path, "7,x,y,not-a-time,12.5,45.5,1")

    result = runner.invoke(app, ["run", "-i", str(root), "-o", str(tmp_path / "out")])

    assert result.exit_code == 1
    assert "Invalid timestamp" in result.output
    assert not (tmp_path / "out").exists()


def test_run_exits_non_zero_on_missing_root(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(
        app, ["run", "-i", str(tmp_path / "missing"), "-o", str(tmp_path / "out")]
    )

    assert result.exit_code == 1
    assert "missing" in result.output


def test_run_requires_input_dir(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(app, ["run", "-o", str(tmp_path / "out")])

    assert result.exit_code != 0


def test_check_reports_without_writing(runner: CliRunner, tmp_path: Path) -> None:
    root = _input_root(tmp_path, "7,x,y,20230101120000,12.5,45.5,1", "too,short")

    result = runner.invoke(app, ["check", "-i", str(root)])

    assert result.exit_code == 0, result.output
    assert "group_count: 1" in result.stdout
    assert "too_few_fields: 1" in result.stdout
    assert sorted(path.name for path in tmp_path.iterdir()) == ["in"]


def test_run_exits_non_zero_on_oversized_numeric_field(runner: CliRunner, tmp_path: Path) -> None:
    root = _input_root(tmp_path, "7,x,y,20230101120000,12.5,45.5," + "9" * 5000)

    result = runner.invoke(app, ["run", "-i", str(root), "-o", str(tmp_path / "out")])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Invalid validity flag" in result.output
    assert not (tmp_path / "out").exists()


def test_failure_message_is_reported_once(runner: CliRunner, tmp_path: Path) -> None:
    root = _input_root(tmp_path, "7,x,y,not-a-time,12.5,45.5,1")

    result = runner.invoke(app, ["run", "-i", str(root), "-o", str(tmp_path / "out")])

    assert result.exit_code == 1
    assert result.output.count("Invalid timestamp") == 1
