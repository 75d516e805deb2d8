"""Console output handler shared by the pipeline components."""
from __future__ import annotations

import sys


class Console:
    """Console output handler with a configurable log level and static prefix.

    Levels: none < error < info < debug
    Default: 'info'
    """

    LEVELS = {
        "none": 0,
        "error": 1,
        "info": 2,
        "debug": 3,
    }

    def __init__(self, level: str = "info", prefix: str | None = "libimport", dry_run: bool = False):
        if level not in self.LEVELS:
            raise ValueError(f"Unknown log level '{level}'. Expected one of: {', '.join(self.LEVELS)}")
        self.level_name = level
        self.level = self.LEVELS[level]
        self.prefix = prefix
        self.dry_run = dry_run

    def _format(self, tag: str, message: str) -> str:
        if self.prefix:
            return f"[{tag}] [{self.prefix}] {message}"
        return f"[{tag}] {message}"

    def info(self, message: str) -> None:
        if self.level >= self.LEVELS["info"]:
            print(self._format("INFO", message))

    def error(self, message: str) -> None:
        if self.level >= self.LEVELS["error"]:
            print(self._format("ERROR", message), file=sys.stderr)

    def dry(self, message: str) -> None:
        if self.dry_run:
            print(self._format("DRY", message))

    def debug(self, message: str) -> None:
        if self.level >= self.LEVELS["debug"]:
            print(self._format("DEBUG", message))
