"""Fatal errors raised by the cleaning pipeline."""

from __future__ import annotations

from typing import Optional


class PipelineError(Exception):
    """Base class for every error that aborts a run."""


class ScanError(PipelineError):
    """An input root or one of its files could not be traversed or read."""

    def __init__(self, message: str, root: Optional[str] = None, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.root = root
        self.path = path


class ParseError(PipelineError):
    """A field that is present on a line could not be parsed."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        line_number: Optional[int] = None,
        field: Optional[str] = None,
        value: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.line_number = line_number
        self.field = field
        self.value = value

    def __str__(self) -> str:
        message = super().__str__()
        if self.path is None:
            return message
        if self.line_number is None:
            return f"{message} ({self.path})"
        return f"{message} ({self.path}:{self.line_number})"


class IoError(PipelineError):
    """The output directory or a group file could not be created or written."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path
