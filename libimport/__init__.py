"""Import SDK library sources into a project as toolchain library projects."""
from __future__ import annotations

from .cli import main
from .pipeline import LibraryDescriptor, Orchestrator, PipelineResult

__all__ = ["LibraryDescriptor", "Orchestrator", "PipelineResult", "main"]
