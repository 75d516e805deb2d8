"""Built-in and file-based library set definitions."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping
import os

from .config_loader import load_config_file, normalize_string_list
from .errors import LibrarySetError
from .pipeline import LibraryDescriptor
from .preparer import ToolchainCommands
from .properties import DEFAULT_REFERENCE_PREFIX
from .template import TemplateError, TemplateResolver

DEFAULT_LIBRARY_SET = "play-services"

_APPCOMPAT = {
    "name": "appcompat_lib",
    "source": "{{sdk.root}}/extras/android/support/v7/appcompat",
    "target": "appcompat_lib",
}
_MEDIAROUTER = {
    "name": "mediarouter_lib",
    "source": "{{sdk.root}}/extras/android/support/v7/mediarouter",
    "target": "mediarouter_lib",
    "depends_on": ["appcompat_lib"],
}
_PLAY_SERVICES = {
    "name": "google-play-services_lib",
    "source": "{{sdk.root}}/extras/google/google_play_services/libproject/google-play-services_lib",
    "target": "google-play-services_lib",
}

BUILTIN_LIBRARY_SETS: Dict[str, Dict[str, Any]] = {
    "play-services": {
        "description": "Support appcompat and mediarouter plus Google Play Services",
        "libraries": [_APPCOMPAT, _MEDIAROUTER, _PLAY_SERVICES],
    },
    "play-services-single": {
        "description": "Google Play Services only, pinned to an api version",
        "libraries": [{**_PLAY_SERVICES, "api_version": 19}],
    },
}


@dataclass(slots=True)
class LibrarySet:
    name: str
    libraries: List[LibraryDescriptor]
    toolchain: ToolchainCommands = field(default_factory=ToolchainCommands)
    reference_prefix: str = DEFAULT_REFERENCE_PREFIX
    description: str | None = None


def load_definition(name: str | None = None, *, path: Path | None = None) -> tuple[str, Mapping[str, Any]]:
    """Return ``(name, raw definition)`` from a file or the built-in sets."""

    if path is not None:
        return path.stem, load_config_file(path)
    key = name or DEFAULT_LIBRARY_SET
    try:
        return key, BUILTIN_LIBRARY_SETS[key]
    except KeyError:
        available = ", ".join(sorted(BUILTIN_LIBRARY_SETS))
        raise LibrarySetError(f"Unknown library set '{key}'. Available: {available}") from None


def resolve_library_set(
    name: str,
    definition: Mapping[str, Any],
    *,
    target_dir: Path,
    context: Mapping[str, Any],
    api_version: int | None = None,
) -> LibrarySet:
    """Resolve placeholders and dependency names into :class:`LibraryDescriptor` objects.

    Dependencies are referenced by library name and must name a library
    listed earlier in the set. ``api_version`` overrides the version of every
    library that declares one.
    """

    resolver = TemplateResolver(context)
    raw_libraries = definition.get("libraries")
    if not isinstance(raw_libraries, list) or not raw_libraries:
        raise LibrarySetError(f"Library set '{name}' must define a non-empty 'libraries' list")

    libraries: List[LibraryDescriptor] = []
    by_name: Dict[str, LibraryDescriptor] = {}
    for index, raw in enumerate(raw_libraries):
        if not isinstance(raw, Mapping):
            raise LibrarySetError(f"Library #{index + 1} of '{name}' must be a mapping")
        library = _resolve_library(raw, resolver=resolver, target_dir=target_dir, known=by_name, api_version=api_version)
        if library.name in by_name:
            raise LibrarySetError(f"Duplicate library '{library.name}' in '{name}'")
        by_name[library.name] = library
        libraries.append(library)

    toolchain_raw = definition.get("toolchain") or {}
    if not isinstance(toolchain_raw, Mapping):
        raise LibrarySetError(f"'toolchain' of '{name}' must be a mapping")
    try:
        toolchain = ToolchainCommands.from_mapping(toolchain_raw)
    except TypeError as exc:
        raise LibrarySetError(str(exc)) from exc
    sdk_root = Path(str(context.get("sdk", {}).get("root", "")))
    for library in libraries:
        toolchain.render(sdk_root=sdk_root, library_path=library.target_path)

    return LibrarySet(
        name=name,
        libraries=libraries,
        toolchain=toolchain,
        reference_prefix=str(definition.get("reference_prefix", DEFAULT_REFERENCE_PREFIX)),
        description=definition.get("description"),
    )


def _resolve_library(
    raw: Mapping[str, Any],
    *,
    resolver: TemplateResolver,
    target_dir: Path,
    known: Mapping[str, LibraryDescriptor],
    api_version: int | None,
) -> LibraryDescriptor:
    missing = [key for key in ("name", "source", "target") if not raw.get(key)]
    if missing:
        raise LibrarySetError(f"Library definition is missing: {', '.join(missing)}")

    name = str(raw["name"])
    try:
        source = Path(resolver.resolve(str(raw["source"])))
        target = Path(resolver.resolve(str(raw["target"])))
    except TemplateError as exc:
        raise LibrarySetError(f"Library '{name}': {exc}") from exc
    if not target.is_absolute():
        target = target_dir / target

    try:
        dependency_names = normalize_string_list(raw.get("depends_on"), field_name="depends_on")
    except TypeError as exc:
        raise LibrarySetError(f"Library '{name}': {exc}") from exc

    references: List[str] = []
    for dependency in dependency_names:
        if dependency not in known:
            raise LibrarySetError(
                f"Library '{name}' depends on '{dependency}', which is not listed before it"
            )
        relative = os.path.relpath(known[dependency].target_path, target)
        references.append(Path(relative).as_posix())

    declared_version = raw.get("api_version")
    if declared_version is not None and api_version is not None:
        declared_version = api_version
    if declared_version is not None:
        try:
            declared_version = int(declared_version)
        except (TypeError, ValueError) as exc:
            raise LibrarySetError(f"Library '{name}': api_version must be an integer") from exc

    return LibraryDescriptor(
        name=name,
        source_path=source,
        target_path=target,
        depends_on=tuple(references),
        api_version=declared_version,
    )


__all__ = [
    "BUILTIN_LIBRARY_SETS",
    "DEFAULT_LIBRARY_SET",
    "LibrarySet",
    "load_definition",
    "resolve_library_set",
]
