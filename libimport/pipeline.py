"""Sequencing of the copy, link and prepare stages across libraries."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Sequence
import json

from .console import Console
from .copier import PathCopier
from .errors import CopyEntryError, PipelineError
from .preparer import LibraryProjectPreparer, PreparationStep
from .properties import PropertyFilePatcher, ReferenceLinker


@dataclass(frozen=True, slots=True)
class LibraryDescriptor:
    """One SDK source tree to copy and turn into a library project.

    ``depends_on`` holds reference paths relative to ``target_path``.
    """

    name: str
    source_path: Path
    target_path: Path
    depends_on: tuple[str, ...] = ()
    api_version: int | None = None


class StageKind(str, Enum):
    COPY = "copy"
    LINK = "link"
    PATCH = "patch"
    PREPARE = "prepare"


@dataclass(frozen=True, slots=True)
class PipelineStage:
    library: LibraryDescriptor
    kind: StageKind
    description: str


@dataclass(slots=True)
class PipelineResult:
    """Terminal outcome of a pipeline run."""

    completed: List[str] = field(default_factory=list)
    error: PipelineError | None = None
    failed_library: str | None = None
    failed_stage: StageKind | None = None
    copy_failures: List[CopyEntryError] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


class Orchestrator:
    def __init__(
        self,
        *,
        copier: PathCopier,
        linker: ReferenceLinker,
        patcher: PropertyFilePatcher,
        preparer: LibraryProjectPreparer,
        console: Console,
    ) -> None:
        self._copier = copier
        self._linker = linker
        self._patcher = patcher
        self._preparer = preparer
        self._console = console

    def plan(self, libraries: Sequence[LibraryDescriptor]) -> List[PipelineStage]:
        stages: List[PipelineStage] = []
        for library in libraries:
            stages.append(
                PipelineStage(library, StageKind.COPY, f"Copy {library.source_path} to {library.target_path}")
            )
            if library.depends_on:
                stages.append(
                    PipelineStage(library, StageKind.LINK, f"Add references {', '.join(library.depends_on)}")
                )
            if library.api_version is not None:
                stages.append(
                    PipelineStage(library, StageKind.PATCH, f"Set android api version {library.api_version}")
                )
            stages.append(
                PipelineStage(library, StageKind.PREPARE, f"Prepare library project at {library.target_path}")
            )
        return stages

    def run(self, libraries: Sequence[LibraryDescriptor]) -> PipelineResult:
        result = PipelineResult()
        for stage in self.plan(libraries):
            self._console.debug(f"{stage.library.name}: {stage.description}")
            try:
                self._execute(stage, result)
            except PipelineError as exc:
                self._console.error(f"{stage.library.name}: {exc}")
                result.error = exc
                result.failed_library = stage.library.name
                result.failed_stage = stage.kind
                return result
            if stage.kind is StageKind.PREPARE:
                result.completed.append(stage.library.name)

        self._console.info(f"Prepared {len(result.completed)} library project(s)")
        return result

    def _execute(self, stage: PipelineStage, result: PipelineResult) -> None:
        library = stage.library
        if stage.kind is StageKind.COPY:
            report = self._copier.copy(library.source_path, library.target_path)
            result.copy_failures.extend(report.failures)
        elif stage.kind is StageKind.LINK:
            self._linker.add_references(library.target_path, library.depends_on)
        elif stage.kind is StageKind.PATCH:
            self._patcher.set_api_version(library.target_path, library.api_version)
        elif stage.kind is StageKind.PREPARE:
            self._preparer.prepare(library.target_path)
        else:  # pragma: no cover - exhaustive over StageKind
            raise ValueError(f"Unsupported stage: {stage.kind}")

    def preparation_steps(self, library: LibraryDescriptor) -> List[PreparationStep]:
        return self._preparer.steps(library.target_path)

    def serialize_plan(self, libraries: Sequence[LibraryDescriptor]) -> str:
        data = [
            {
                "library": stage.library.name,
                "stage": stage.kind.value,
                "description": stage.description,
                "commands": [step.command for step in self.preparation_steps(stage.library)]
                if stage.kind is StageKind.PREPARE
                else [],
            }
            for stage in self.plan(libraries)
        ]
        return json.dumps(data, indent=2)


__all__ = [
    "LibraryDescriptor",
    "Orchestrator",
    "PipelineResult",
    "PipelineStage",
    "StageKind",
]
