"""Best-effort recursive directory copy."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List
import shutil

from .console import Console
from .errors import CopyEntryError


@dataclass(slots=True)
class CopyReport:
    files: int = 0
    directories: int = 0
    failures: List[CopyEntryError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class PathCopier:
    """Mirror a directory tree into a new location.

    Failures of individual entries are logged and collected in the returned
    :class:`CopyReport`; the walk continues with the remaining siblings.
    A missing source is treated as nothing to copy.
    """

    def __init__(self, console: Console) -> None:
        self._console = console

    def copy(self, source: Path, destination: Path) -> CopyReport:
        report = CopyReport()
        self._copy_entry(Path(source), Path(destination), report)
        return report

    def _copy_entry(self, source: Path, destination: Path, report: CopyReport) -> None:
        try:
            if not source.exists():
                self._console.debug(f"Nothing to copy at {source}")
                return
            if source.is_dir():
                self._console.info(f"Copying {source} to {destination} ...")
                destination.mkdir()
                report.directories += 1
                children = sorted(source.iterdir(), key=lambda child: child.name)
            else:
                self._copy_file(source, destination)
                report.files += 1
                return
        except OSError as exc:
            failure = CopyEntryError(source, destination, exc)
            self._console.error(str(failure))
            report.failures.append(failure)
            return

        for child in children:
            self._copy_entry(child, destination / child.name, report)

    @staticmethod
    def _copy_file(source: Path, destination: Path) -> None:
        with source.open("rb") as reader:
            with destination.open("xb") as writer:
                try:
                    shutil.copyfileobj(reader, writer)
                except OSError:
                    writer.close()
                    destination.unlink(missing_ok=True)
                    raise


__all__ = ["CopyReport", "PathCopier"]
