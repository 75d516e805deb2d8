"""Error types raised by the library import pipeline."""
from __future__ import annotations

from pathlib import Path


class PipelineError(RuntimeError):
    """Base class for errors that terminate the pipeline."""


class MissingEnvironment(PipelineError):
    """Raised when the SDK root environment variable is not set."""

    def __init__(self, variable: str):
        super().__init__(f"Environment variable {variable} is not set to the SDK directory")
        self.variable = variable


class CommandFailed(PipelineError):
    """Raised when an external command exits non-zero or cannot be spawned."""

    def __init__(
        self,
        command_line: str,
        *,
        exit_code: int | None = None,
        cause: BaseException | None = None,
        stdout: str = "",
        stderr: str = "",
    ):
        if cause is not None:
            message = f"Error executing {command_line}: {cause}"
        else:
            message = f"Error executing {command_line}: exit code {exit_code}"
        super().__init__(message)
        self.command_line = command_line
        self.exit_code = exit_code
        self.cause = cause
        self.stdout = stdout
        self.stderr = stderr


class ConfigReadError(PipelineError):
    def __init__(self, path: Path, cause: BaseException | None = None):
        super().__init__(f"Error reading {path}: {cause}" if cause else f"Error reading {path}")
        self.path = path
        self.cause = cause


class ConfigWriteError(PipelineError):
    def __init__(self, path: Path, cause: BaseException | None = None):
        super().__init__(f"Error writing {path}: {cause}" if cause else f"Error writing {path}")
        self.path = path
        self.cause = cause


class LibrarySetError(PipelineError):
    """Raised when a library set definition is malformed."""


class CopyEntryError(Exception):
    """A single file or directory that could not be copied.

    Never raised out of the copier; instances are collected in a
    :class:`~libimport.copier.CopyReport`.
    """

    def __init__(self, source: Path, destination: Path, cause: BaseException):
        super().__init__(f"Error copying {source} to {destination}: {cause}")
        self.source = source
        self.destination = destination
        self.cause = cause


__all__ = [
    "CommandFailed",
    "ConfigReadError",
    "ConfigWriteError",
    "CopyEntryError",
    "LibrarySetError",
    "MissingEnvironment",
    "PipelineError",
]
