"""Turns a copied source tree into a toolchain library project."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Mapping, Sequence

from .command_runner import CommandRunner
from .console import Console
from .errors import LibrarySetError
from .template import TemplateError, TemplateResolver


@dataclass(frozen=True, slots=True)
class ToolchainCommands:
    """Argument templates for the three preparation steps."""

    update: tuple[str, ...] = ("{{sdk.root}}/tools/android", "update", "lib-project", "-p", "{{library.path}}")
    clean: tuple[str, ...] = ("ant", "clean", "-f", "{{library.build_file}}")
    release: tuple[str, ...] = ("ant", "release", "-f", "{{library.build_file}}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ToolchainCommands":
        defaults = cls()
        values = {}
        for name in ("update", "clean", "release"):
            raw = data.get(name)
            if raw is None:
                values[name] = getattr(defaults, name)
                continue
            if isinstance(raw, str) or not isinstance(raw, Sequence) or not raw:
                raise TypeError(f"toolchain.{name} must be a non-empty list of arguments")
            values[name] = tuple(str(part) for part in raw)
        return cls(**values)

    def render(self, *, sdk_root: Path, library_path: Path, build_file: str = "build.xml") -> List[List[str]]:
        """Return the update, clean and release argv lists for one library."""

        resolver = TemplateResolver(
            {
                "sdk": {"root": str(sdk_root)},
                "library": {
                    "path": str(library_path),
                    "name": library_path.name,
                    "build_file": str(library_path / build_file),
                },
            }
        )
        try:
            return [resolver.resolve(list(template)) for template in (self.update, self.clean, self.release)]
        except TemplateError as exc:
            raise LibrarySetError(f"Invalid toolchain command: {exc}") from exc


@dataclass(slots=True)
class PreparationStep:
    description: str
    command: List[str]


class LibraryProjectPreparer:
    """Runs update, clean and release against a library, in that order.

    The first failing command raises :class:`~libimport.errors.CommandFailed`
    and the remaining commands are not run.
    """

    def __init__(
        self,
        *,
        command_runner: CommandRunner,
        console: Console,
        sdk_root: Path,
        commands: ToolchainCommands | None = None,
        build_file: str = "build.xml",
    ) -> None:
        self._command_runner = command_runner
        self._console = console
        self._sdk_root = sdk_root
        self._commands = commands or ToolchainCommands()
        self._build_file = build_file

    def steps(self, library_path: Path) -> List[PreparationStep]:
        update, clean, release = self._commands.render(
            sdk_root=self._sdk_root, library_path=Path(library_path), build_file=self._build_file
        )
        return [
            PreparationStep("Update library project", update),
            PreparationStep("Clean build outputs", clean),
            PreparationStep("Release build", release),
        ]

    def prepare(self, library_path: Path) -> None:
        self._console.info(f"Preparing library project at {library_path} ...")
        for step in self.steps(library_path):
            self._command_runner.run(step.command, note=step.description)
        self._console.info(f"Turned {library_path} into a library project")


__all__ = ["LibraryProjectPreparer", "PreparationStep", "ToolchainCommands"]
