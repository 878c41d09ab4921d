"""Orchestration of the scan, parse, sort and write phases."""

from __future__ import annotations

import logging
import os
import time
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from models.records import RejectReason
from models.report import RunReport
from services.aggregator import Aggregator
from services.parser import RecordParser
from services.sorter import Sorter
from services.tasks import wait_all
from services.writer import Writer
from settings import get_settings
from storage.scanner import DirectoryScanner, open_lines

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


@dataclass
class FileStats:
    """Per-file counters returned by a parse worker."""

    lines_read: int = 0
    accepted: int = 0
    rejected: Counter = field(default_factory=Counter)


class Pipeline:
    """Coordinates scanning, concurrent parsing, sorting and emission."""

    def __init__(
        self,
        scanner: DirectoryScanner,
        parser: RecordParser,
        sorter: Sorter,
        writer: Writer,
        workers: int = 4,
        aggregator_factory: Callable[[], Aggregator] = Aggregator,
    ) -> None:
        self.scanner = scanner
        self.parser = parser
        self.sorter = sorter
        self.writer = writer
        self.workers = workers
        self.aggregator_factory = aggregator_factory

    def run(self, input_roots: Sequence[PathLike], output_dir: PathLike) -> RunReport:
        """Process every root and write one file per identifier to ``output_dir``."""
        return self._execute(input_roots, Path(output_dir))

    def check(self, input_roots: Sequence[PathLike]) -> RunReport:
        """Scan, parse and sort without writing any output."""
        return self._execute(input_roots, None)

    def _execute(self, input_roots: Sequence[PathLike], output_dir: Optional[Path]) -> RunReport:
        if not input_roots:
            raise ValueError("At least one input root is required.")

        start_time = time.perf_counter()
        report = RunReport(
            input_roots=[str(root) for root in input_roots],
            output_dir=str(output_dir) if output_dir is not None else None,
            started_at=datetime.now(),
        )
        aggregator = self.aggregator_factory()

        totals = FileStats()
        for root in input_roots:
            for stats in self._process_root(root, aggregator):
                report.files_scanned += 1
                totals.lines_read += stats.lines_read
                totals.accepted += stats.accepted
                totals.rejected.update(stats.rejected)

        aggregator.freeze()
        report.lines_read = totals.lines_read
        report.records_accepted = totals.accepted
        report.rejected = {
            reason: totals.rejected[reason] for reason in RejectReason if totals.rejected[reason]
        }
        report.group_count = self.sorter.sort_all(aggregator)

        if output_dir is not None:
            written = self.writer.flush(output_dir, aggregator.drain())
            report.groups_written = len(written)

        report.finished_at = datetime.now()
        report.processing_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(
            "Run complete",
            extra={
                "file_count": report.files_scanned,
                "record_count": report.records_accepted,
                "group_count": report.group_count,
                "processing_ms": report.processing_ms,
            },
        )
        return report

    def _process_root(self, root: PathLike, aggregator: Aggregator) -> List[FileStats]:
        logger.info("Scanning input root", extra={"root": str(root)})
        executor = ThreadPoolExecutor(max_workers=self.workers)
        try:
            futures = [
                executor.submit(self._process_file, path, aggregator)
                for path in self.scanner.iter_files(root)
            ]
            results = wait_all(futures)
        finally:
            executor.shutdown(wait=True, cancel_futures=True)
        logger.info("Finished input root", extra={"root": str(root), "file_count": len(results)})
        return results

    def _process_file(self, path: Path, aggregator: Aggregator) -> FileStats:
        stats = FileStats()
        source = str(path)
        with open_lines(path) as lines:
            for line_number, line in lines:
                stats.lines_read += 1
                outcome = self.parser.parse_line(line, source=source, line_number=line_number)
                if isinstance(outcome, RejectReason):
                    stats.rejected[outcome] += 1
                    logger.debug(
                        "Skipping line",
                        extra={"path": source, "line_number": line_number, "reason": outcome.value},
                    )
                    continue
                aggregator.record(outcome)
                stats.accepted += 1
        return stats


@lru_cache
def build_default_pipeline(workers: Optional[int] = None) -> Pipeline:
    """Factory that wires the pipeline from environment settings."""
    worker_count = workers or get_settings().worker_count
    return Pipeline(
        scanner=DirectoryScanner(),
        parser=RecordParser(),
        sorter=Sorter(),
        writer=Writer(workers=worker_count),
        workers=worker_count,
    )
