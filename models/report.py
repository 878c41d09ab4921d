"""Pydantic schema for the summary produced by a pipeline run."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from models.records import RejectReason


class RunReport(BaseModel):
    """Counters and timings describing one run over a set of input roots."""

    input_roots: List[str]
    output_dir: Optional[str] = None
    files_scanned: int = Field(0, ge=0)
    lines_read: int = Field(0, ge=0)
    records_accepted: int = Field(0, ge=0)
    rejected: Dict[RejectReason, int] = Field(default_factory=dict)
    group_count: int = Field(0, ge=0)
    groups_written: int = Field(0, ge=0)
    started_at: datetime
    finished_at: Optional[datetime] = None
    processing_ms: Optional[int] = Field(
        default=None, description="Duration in milliseconds from start to finish."
    )

    @property
    def rejected_total(self) -> int:
        return sum(self.rejected.values())


def persist_report(report: RunReport, path: Path) -> None:
    """Write ``report`` to ``path`` as indented JSON."""

    path.parent.mkdir(parents=True, exist_ok=True)
    payload = report.model_dump(mode="json")
    path.write_text(json.dumps(payload, indent=2, sort_keys=True))
