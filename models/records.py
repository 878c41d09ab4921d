"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

OUTPUT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class RejectReason(str, Enum):
    """Benign reasons a line is skipped without failing the run."""

    too_few_fields = "too_few_fields"
    invalid_flag = "invalid_flag"
    zero_coordinates = "zero_coordinates"
    zero_id = "zero_id"


@dataclass(frozen=True, slots=True)
class LocationRecord:
    """A single accepted observation parsed from a raw capture line.

    ``source`` and ``line_number`` record where the line came from. They only
    take part in ordering, never in equality or output.
    """

    id: int
    timestamp: datetime
    lat: str
    lng: str
    source: str = field(default="", compare=False)
    line_number: int = field(default=0, compare=False)

    @property
    def sort_key(self) -> tuple[datetime, str, int]:
        return (self.timestamp, self.source, self.line_number)

    def to_line(self) -> str:
        stamp = self.timestamp.strftime(OUTPUT_TIMESTAMP_FORMAT)
        return f"{self.id},{stamp},{self.lat},{self.lng}\n"
