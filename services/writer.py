"""Parallel emission of sorted groups to per-identifier files."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, List, Mapping

from models.errors import IoError
from models.records import LocationRecord
from services.tasks import wait_all

logger = logging.getLogger(__name__)


class Writer:
    """Writes each group to ``{id}.txt`` inside the output directory.

    Groups are written concurrently, one task per group, so no two tasks ever
    touch the same file. The first failure aborts the flush; files written
    before it are left in place.
    """

    def __init__(self, workers: int = 4) -> None:
        self.workers = workers

    def flush(self, output_dir: Path, groups: Mapping[int, List[LocationRecord]]) -> Dict[int, int]:
        """Write every group and return the number of lines written per id."""
        output_dir = Path(output_dir)
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise IoError(
                f"Cannot create output directory {output_dir}: {exc}", path=str(output_dir)
            ) from exc

        ids = list(groups)
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = [
                executor.submit(self._write_group, output_dir, group_id, groups[group_id])
                for group_id in ids
            ]
            counts = wait_all(futures)

        logger.info(
            "Wrote group files",
            extra={"output_dir": str(output_dir), "group_count": len(ids)},
        )
        return dict(zip(ids, counts))

    @staticmethod
    def group_path(output_dir: Path, group_id: int) -> Path:
        return output_dir / f"{group_id}.txt"

    def _write_group(self, output_dir: Path, group_id: int, records: List[LocationRecord]) -> int:
        path = self.group_path(output_dir, group_id)
        try:
            with path.open("w", encoding="utf-8", newline="") as handle:
                for item in records:
                    handle.write(item.to_line())
        except OSError as exc:
            raise IoError(f"Failed to write group file {path}: {exc}", path=str(path)) from exc
        logger.debug(
            "Wrote group file",
            extra={"group_id": group_id, "path": str(path), "record_count": len(records)},
        )
        return len(records)
