"""Line-level parsing and validation of raw capture records."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Union

from models.errors import ParseError
from models.records import LocationRecord, RejectReason

MIN_FIELD_COUNT = 5
ZERO_COORDINATE = "0.0000000"
INPUT_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

ID_INDEX = 0
TIMESTAMP_INDEX = 3
LAT_INDEX = 4
LNG_INDEX = 5

_UNSIGNED_PATTERN = re.compile(r"\+?[0-9]{1,20}")
MAX_UNSIGNED = 2**64 - 1
_TIMESTAMP_PATTERN = re.compile(r"[0-9]{14}")

ParseOutcome = Union[LocationRecord, RejectReason]


class RecordParser:
    """Turns one raw line into a :class:`LocationRecord` or a reject reason.

    Rejects are benign and returned as :class:`RejectReason` values. Fields
    that are present but malformed raise :class:`ParseError`.
    """

    def parse_line(
        self, line: str, source: str = "", line_number: int = 0
    ) -> ParseOutcome:
        parts = line.split(",")
        if len(parts) < MIN_FIELD_COUNT:
            return RejectReason.too_few_fields

        flag = self._parse_unsigned(parts[-1], "validity flag", source, line_number)
        if flag == 0:
            return RejectReason.invalid_flag

        if len(parts) <= LNG_INDEX:
            raise ParseError(
                f"Missing longitude field: expected at least {LNG_INDEX + 1} fields, got {len(parts)}",
                path=source or None,
                line_number=line_number or None,
                field="lng",
            )
        lat = parts[LAT_INDEX].strip()
        lng = parts[LNG_INDEX].strip()
        if lat == ZERO_COORDINATE or lng == ZERO_COORDINATE:
            return RejectReason.zero_coordinates

        timestamp = self._parse_timestamp(parts[TIMESTAMP_INDEX], source, line_number)
        record_id = self._parse_unsigned(parts[ID_INDEX], "id", source, line_number)
        if record_id == 0:
            return RejectReason.zero_id

        return LocationRecord(
            id=record_id,
            timestamp=timestamp,
            lat=lat,
            lng=lng,
            source=source,
            line_number=line_number,
        )

    @staticmethod
    def _parse_unsigned(value: str, field: str, source: str, line_number: int) -> int:
        if not _UNSIGNED_PATTERN.fullmatch(value) or int(value) > MAX_UNSIGNED:
            raise ParseError(
                f"Invalid {field} {value!r}: expected an unsigned 64-bit integer",
                path=source or None,
                line_number=line_number or None,
                field=field,
                value=value,
            )
        return int(value)

    @staticmethod
    def _parse_timestamp(value: str, source: str, line_number: int) -> datetime:
        error = ParseError(
            f"Invalid timestamp {value!r}: expected YYYYMMDDHHMMSS",
            path=source or None,
            line_number=line_number or None,
            field="timestamp",
            value=value,
        )
        if not _TIMESTAMP_PATTERN.fullmatch(value):
            raise error
        try:
            return datetime.strptime(value, INPUT_TIMESTAMP_FORMAT)
        except ValueError as exc:
            raise error from exc
