"""Utilities for executing toolchain commands with optional dry-run support."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Sequence
import os
import shlex
import subprocess

from .console import Console
from .errors import CommandFailed


@dataclass
class CommandResult:
    """Represents the outcome of an executed command."""

    command: Sequence[str]
    returncode: int
    stdout: str
    stderr: str


def format_command(command: Sequence[str]) -> str:
    return " ".join(shlex.quote(str(part)) for part in command)


class CommandRunner:
    """Abstract command runner interface."""

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        note: str | None = None,
    ) -> CommandResult:
        raise NotImplementedError

    def format_command(self, command: Sequence[str]) -> str:
        return format_command(command)


class SubprocessCommandRunner(CommandRunner):
    """Command runner that executes commands via :mod:`subprocess`.

    Output captured from either stream is logged but never decides the
    outcome; only the exit status or a spawn failure does.
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(level="none")

    @staticmethod
    def _merge_environment(env: Mapping[str, str] | None) -> Dict[str, str] | None:
        if env is None:
            return None
        merged = os.environ.copy()
        merged.update(env)
        return merged

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        note: str | None = None,
    ) -> CommandResult:
        command_line = self.format_command(command)
        self._console.info(f"Executing {command_line} ...")
        try:
            process = subprocess.run(
                [str(part) for part in command],
                cwd=str(cwd) if cwd else None,
                env=self._merge_environment(env),
                capture_output=True,
                text=True,
                errors="replace",
                check=False,
            )
        except OSError as exc:
            self._console.error(f"Error executing {command_line}: {exc}")
            raise CommandFailed(command_line, cause=exc) from exc

        if process.stdout:
            self._console.info(f"Exec: {process.stdout.rstrip()}")
        if process.stderr:
            self._console.info(f"Exec: {process.stderr.rstrip()}")

        result = CommandResult(
            command=command,
            returncode=process.returncode,
            stdout=process.stdout,
            stderr=process.stderr,
        )
        if check and result.returncode != 0:
            self._console.error(f"Error executing {command_line}: {result.returncode}")
            raise CommandFailed(
                command_line,
                exit_code=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
            )
        self._console.info(f"Executed {command_line}")
        return result


@dataclass(slots=True)
class RecordedCommand:
    command: List[str]
    cwd: str | None
    env: Dict[str, str]
    note: str | None
    returncode: int = 0


@dataclass(slots=True)
class _FailureRule:
    fragment: str
    returncode: int


class RecordingCommandRunner(CommandRunner):
    """Command runner that records commands instead of executing them.

    Commands whose formatted line contains a fragment registered with
    :meth:`fail_matching` are recorded and then reported as failed.
    """

    def __init__(self) -> None:
        self.commands: List[RecordedCommand] = []
        self._failures: List[_FailureRule] = []

    def fail_matching(self, fragment: str, *, returncode: int = 1) -> None:
        if returncode == 0:
            raise ValueError("returncode for a failing command must be non-zero")
        self._failures.append(_FailureRule(fragment=fragment, returncode=returncode))

    def _returncode_for(self, command_line: str) -> int:
        for rule in self._failures:
            if rule.fragment in command_line:
                return rule.returncode
        return 0

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        note: str | None = None,
    ) -> CommandResult:
        command_line = self.format_command(command)
        returncode = self._returncode_for(command_line)
        self.commands.append(
            RecordedCommand(
                command=[str(part) for part in command],
                cwd=str(cwd) if cwd else None,
                env=dict(env) if env else {},
                note=note,
                returncode=returncode,
            )
        )
        if check and returncode != 0:
            raise CommandFailed(command_line, exit_code=returncode)
        return CommandResult(command=command, returncode=returncode, stdout="", stderr="")


__all__ = [
    "CommandResult",
    "CommandRunner",
    "RecordedCommand",
    "RecordingCommandRunner",
    "SubprocessCommandRunner",
    "format_command",
]
