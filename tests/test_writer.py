from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from models.errors import IoError
from models.records import LocationRecord
from services.writer import Writer


def _record(record_id: int, hour: int, lat: str = "12.5", lng: str = "45.5") -> LocationRecord:
    return LocationRecord(
        id=record_id, timestamp=datetime(2023, 1, 1, hour, 0, 0), lat=lat, lng=lng
    )


def test_flush_writes_one_file_per_group(tmp_path: Path) -> None:
    output_dir = tmp_path / "out" / "nested"
    groups = {
        7: [_record(7, 1), _record(7, 2, "12.6", "45.6")],
        11: [_record(11, 5)],
    }

    counts = Writer(workers=2).flush(output_dir, groups)

    assert counts == {7: 2, 11: 1}
    assert sorted(path.name for path in output_dir.iterdir()) == ["11.txt", "7.txt"]
    assert (output_dir / "7.txt").read_bytes() == (
        b"7,2023-01-01 01:00:00,12.5,45.5\n7,2023-01-01 02:00:00,12.6,45.6\n"
    )
    assert (output_dir / "11.txt").read_text() == "11,2023-01-01 05:00:00,12.5,45.5\n"


def test_flush_truncates_existing_files(tmp_path: Path) -> None:
    (tmp_path / "7.txt").write_text("stale\nstale\nstale\n")

    Writer().flush(tmp_path, {7: [_record(7, 1)]})

    assert (tmp_path / "7.txt").read_text() == "7,2023-01-01 01:00:00,12.5,45.5\n"


def test_flush_with_no_groups_still_creates_directory(tmp_path: Path) -> None:
    output_dir = tmp_path / "empty"

    assert Writer().flush(output_dir, {}) == {}
    assert output_dir.is_dir()


def test_flush_fails_when_output_path_is_a_file(tmp_path: Path) -> None:
    blocker = tmp_path / "out"
    blocker.write_text("not a directory")

    with pytest.raises(IoError) as excinfo:
        Writer().flush(blocker, {1: [_record(1, 1)]})

    assert excinfo.value.path == str(blocker)


def test_flush_fails_when_group_file_cannot_be_created(tmp_path: Path) -> None:
    (tmp_path / "3.txt").mkdir()

    with pytest.raises(IoError) as excinfo:
        Writer().flush(tmp_path, {3: [_record(3, 1)]})

    assert excinfo.value.path == str(tmp_path / "3.txt")


def test_group_failure_keeps_files_already_written(tmp_path: Path) -> None:
    (tmp_path / "3.txt").mkdir()
    groups = {
        1: [_record(1, 1)],
        2: [_record(2, 2)],
        3: [_record(3, 3)],
    }

    with pytest.raises(IoError) as excinfo:
        Writer(workers=1).flush(tmp_path, groups)

    assert excinfo.value.path == str(tmp_path / "3.txt")
    assert (tmp_path / "1.txt").read_text() == "1,2023-01-01 01:00:00,12.5,45.5\n"
    assert (tmp_path / "2.txt").read_text() == "2,2023-01-01 02:00:00,12.5,45.5\n"
