from __future__ import annotations

import logging
import os
import stat
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, TextIO, Tuple

from models.errors import ParseError, ScanError

logger = logging.getLogger(__name__)


class DirectoryScanner:
    """Lists every regular file below an input root."""

    def iter_files(self, root: str | os.PathLike[str]) -> Iterator[Path]:
        """Lazily yield absolute paths of regular files under ``root``.

        Symlinks are never followed or yielded. A root that is itself a regular
        file yields only that file.
        """

        root_path = Path(root).absolute()
        try:
            mode = root_path.lstat().st_mode
        except OSError as exc:
            raise ScanError(f"Cannot access input root {root_path}: {exc}", root=str(root_path)) from exc

        if stat.S_ISREG(mode):
            yield root_path
            return

        def _raise(exc: OSError) -> None:
            raise ScanError(
                f"Failed to traverse input root {root_path}: {exc}",
                root=str(root_path),
                path=exc.filename,
            ) from exc

        for dirpath, dirnames, filenames in os.walk(root_path, onerror=_raise):
            dirnames.sort()
            for name in sorted(filenames):
                path = Path(dirpath) / name
                if self._is_regular_file(path, root_path):
                    yield path

    @staticmethod
    def _is_regular_file(path: Path, root: Path) -> bool:
        try:
            mode = path.lstat().st_mode
        except OSError as exc:
            raise ScanError(
                f"Failed to stat {path}: {exc}", root=str(root), path=str(path)
            ) from exc
        if stat.S_ISREG(mode):
            return True
        logger.debug("Skipping non-regular entry", extra={"root": str(root), "path": str(path)})
        return False


@contextmanager
def open_lines(path: Path, encoding: str = "utf-8") -> Iterator[Iterator[Tuple[int, str]]]:
    """Yield an iterator of ``(line_number, line)`` pairs for ``path``.

    Line numbers start at 1 and trailing line terminators are removed. Open and
    read failures raise :class:`ScanError`; undecodable bytes raise
    :class:`ParseError`.
    """

    try:
        handle: TextIO = path.open("r", encoding=encoding, newline="\n")
    except OSError as exc:
        raise ScanError(f"Cannot open input file {path}: {exc}", path=str(path)) from exc

    def _lines() -> Iterator[Tuple[int, str]]:
        line_number = 0
        while True:
            try:
                line = handle.readline()
            except UnicodeDecodeError as exc:
                raise ParseError(
                    f"Input is not valid {encoding} near line {line_number + 1}",
                    path=str(path),
                ) from exc
            except OSError as exc:
                raise ScanError(f"Failed to read input file {path}: {exc}", path=str(path)) from exc
            if not line:
                return
            line_number += 1
            if line.endswith("\n"):
                line = line[:-1]
                if line.endswith("\r"):
                    line = line[:-1]
            yield line_number, line

    with handle:
        yield _lines()
