"""Command line interface for the library importer."""
from __future__ import annotations

from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import Iterable, List, Sequence
import os

import yaml

from .command_runner import CommandRunner, RecordingCommandRunner, SubprocessCommandRunner, format_command
from .console import Console
from .copier import PathCopier
from .environment import DEFAULT_SDK_VARIABLE, SdkEnvironment, build_context
from .errors import PipelineError
from .library_sets import BUILTIN_LIBRARY_SETS, LibrarySet, load_definition, resolve_library_set
from .pipeline import Orchestrator, StageKind
from .preparer import LibraryProjectPreparer
from .properties import PropertyFilePatcher, ReferenceLinker


def build_orchestrator(
    *,
    library_set: LibrarySet,
    sdk: SdkEnvironment,
    console: Console,
    command_runner: CommandRunner,
) -> Orchestrator:
    return Orchestrator(
        copier=PathCopier(console),
        linker=ReferenceLinker(console, prefix=library_set.reference_prefix),
        patcher=PropertyFilePatcher(console),
        preparer=LibraryProjectPreparer(
            command_runner=command_runner,
            console=console,
            sdk_root=sdk.root,
            commands=library_set.toolchain,
        ),
        console=console,
    )


def _parse_arguments(argv: Iterable[str] | None) -> Namespace:
    parser = ArgumentParser(
        prog="libimport",
        description="Copy SDK library sources into a project and turn them into library projects",
    )
    parser.add_argument("target_dir", nargs="?", help="Working directory that receives one folder per library")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--library-set", "-s", help="Built-in library set to import (default: play-services)")
    source.add_argument("--config", "-c", type=Path, help="Library set definition file (.toml, .json, .yaml)")
    parser.add_argument("--api-version", type=int, help="Override the android api version of libraries that pin one")
    parser.add_argument(
        "--sdk-variable",
        default=DEFAULT_SDK_VARIABLE,
        help=f"Environment variable holding the SDK root (default: {DEFAULT_SDK_VARIABLE})",
    )
    parser.add_argument("--dry-run", "-n", action="store_true", help="Show the planned stages without running them")
    parser.add_argument("--json", action="store_true", help="With --dry-run, print the plan as JSON")
    parser.add_argument(
        "--log",
        "-l",
        choices=list(Console.LEVELS),
        default="info",
        help="Set log level (default: info)",
    )
    parser.add_argument("--list", action="store_true", help="List built-in library sets and exit")
    args = parser.parse_args(list(argv) if argv is not None else None)
    if not args.list and not args.target_dir:
        parser.error("the following arguments are required: target_dir")
    return args


def _list_library_sets() -> None:
    for name in sorted(BUILTIN_LIBRARY_SETS):
        definition = BUILTIN_LIBRARY_SETS[name]
        libraries = ", ".join(entry["name"] for entry in definition["libraries"])
        print(f"{name}: {definition.get('description', '')} [{libraries}]")


def _print_plan(orchestrator: Orchestrator, library_set: LibrarySet, *, as_json: bool) -> None:
    if as_json:
        print(orchestrator.serialize_plan(library_set.libraries))
        return
    for stage in orchestrator.plan(library_set.libraries):
        print(f"[dry-run] {stage.library.name}: {stage.description}")
        if stage.kind is StageKind.PREPARE:
            for step in orchestrator.preparation_steps(stage.library):
                print(f"[dry-run]   {step.description}: {format_command(step.command)}")


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_arguments(argv)
    if args.list:
        _list_library_sets()
        return 0

    console = Console(level=args.log, dry_run=args.dry_run)
    try:
        sdk = SdkEnvironment.from_environ(variable=args.sdk_variable, console=console)
        target_dir = Path(args.target_dir).expanduser().resolve()
        name, definition = load_definition(args.library_set, path=args.config)
        library_set = resolve_library_set(
            name,
            definition,
            target_dir=target_dir,
            context=build_context(sdk=sdk, target_dir=target_dir, env=os.environ),
            api_version=args.api_version,
        )
    except (PipelineError, OSError, ValueError, TypeError, yaml.YAMLError) as exc:
        print(f"Error: {exc}")
        return 1
    if args.api_version is not None and all(library.api_version is None for library in library_set.libraries):
        console.info(
            f"--api-version {args.api_version} ignored: no library in '{library_set.name}' pins an api version"
        )

    runner: CommandRunner = RecordingCommandRunner() if args.dry_run else SubprocessCommandRunner(console)
    orchestrator = build_orchestrator(library_set=library_set, sdk=sdk, console=console, command_runner=runner)

    if args.dry_run:
        if not args.json:
            console.dry(f"Library set '{library_set.name}' into {target_dir}, nothing will be changed")
        _print_plan(orchestrator, library_set, as_json=args.json)
        return 0

    console.info(f"Importing library set '{library_set.name}' into {target_dir}")
    target_dir.mkdir(parents=True, exist_ok=True)
    result = orchestrator.run(library_set.libraries)
    if result.copy_failures:
        console.error(f"{len(result.copy_failures)} entries could not be copied")
    if not result.succeeded:
        print(f"Error: {result.error}")
        return 1
    return 0


__all__: List[str] = ["build_orchestrator", "main"]
