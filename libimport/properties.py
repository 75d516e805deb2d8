"""Editing of ``project.properties`` files of library projects."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Sequence
import re

from .console import Console
from .errors import ConfigReadError, ConfigWriteError

PROJECT_PROPERTIES = "project.properties"
DEFAULT_REFERENCE_PREFIX = "android.library.reference"

_TARGET_KEY = "target"
_TARGET_VALUE_PATTERN = re.compile(r"^android-(\d+)$")
_COMMENT_PREFIXES = ("#", "!")


@dataclass(slots=True)
class PropertyLine:
    """One physical line; ``key`` is ``None`` for blanks and comments."""

    text: str
    ending: str = "\n"
    key: str | None = None
    value: str | None = None

    @classmethod
    def parse(cls, line: str) -> "PropertyLine":
        body = line.rstrip("\r\n")
        ending = line[len(body):]
        stripped = body.strip()
        if not stripped or stripped.startswith(_COMMENT_PREFIXES) or "=" not in stripped:
            return cls(text=body, ending=ending)
        key, _, value = body.partition("=")
        return cls(text=body, ending=ending, key=key.strip(), value=value.strip())

    @classmethod
    def entry(cls, key: str, value: str, *, ending: str = "\n") -> "PropertyLine":
        return cls(text=f"{key}={value}", ending=ending, key=key, value=value)

    def render(self) -> str:
        return f"{self.text}{self.ending}"


@dataclass(slots=True)
class PropertiesDocument:
    """Ordered, lossless view of a ``key=value`` text file."""

    lines: List[PropertyLine] = field(default_factory=list)

    @classmethod
    def parse(cls, text: str) -> "PropertiesDocument":
        return cls(lines=[PropertyLine.parse(line) for line in text.splitlines(keepends=True)])

    def entries(self) -> Iterator[PropertyLine]:
        return (line for line in self.lines if line.key is not None)

    def reference_indices(self, prefix: str = DEFAULT_REFERENCE_PREFIX) -> set[int]:
        pattern = re.compile(rf"^{re.escape(prefix)}\.(\d+)$")
        indices: set[int] = set()
        for line in self.entries():
            match = pattern.match(line.key or "")
            if match:
                indices.add(int(match.group(1)))
        return indices

    def ends_with_newline(self) -> bool:
        return not self.lines or bool(self.lines[-1].ending)

    def render(self) -> str:
        return "".join(line.render() for line in self.lines)


def properties_path(path: Path) -> Path:
    """Return the properties file for ``path`` (a library directory or the file itself)."""

    path = Path(path)
    return path / PROJECT_PROPERTIES if path.is_dir() else path


def read_properties(path: Path) -> PropertiesDocument:
    try:
        with path.open("r", encoding="utf-8", newline="") as handle:
            text = handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigReadError(path, exc) from exc
    return PropertiesDocument.parse(text)


class PropertyFilePatcher:
    """Rewrites the target platform declaration of a properties file."""

    def __init__(self, console: Console) -> None:
        self._console = console

    def set_api_version(self, path: Path, api_version: int | str) -> None:
        config_path = properties_path(path)
        document = read_properties(config_path)

        value = f"android-{api_version}"
        for position, line in enumerate(document.lines):
            if line.key == _TARGET_KEY and _TARGET_VALUE_PATTERN.match(line.value or ""):
                document.lines[position] = PropertyLine.entry(_TARGET_KEY, value, ending=line.ending)
                break
        else:
            if not document.ends_with_newline():
                document.lines[-1].ending = "\n"
            document.lines.append(PropertyLine.entry(_TARGET_KEY, value))

        try:
            with config_path.open("w", encoding="utf-8", newline="") as handle:
                handle.write(document.render())
        except OSError as exc:
            raise ConfigWriteError(config_path, exc) from exc
        self._console.info(f"Updated {config_path} with android api version {api_version}")


class ReferenceLinker:
    """Appends library references to a library project's properties file.

    New entries continue after the highest index already present, so gaps
    are kept and existing indices are never reused. Paths are written as
    given and must be relative to the library's own directory.
    """

    def __init__(self, console: Console, *, prefix: str = DEFAULT_REFERENCE_PREFIX) -> None:
        self._console = console
        self._prefix = prefix

    def add_references(self, path: Path, relative_paths: Sequence[str]) -> List[str]:
        config_path = properties_path(path)
        self._console.info(f"Adding references {', '.join(relative_paths)} to {config_path}")
        document = read_properties(config_path)
        if not relative_paths:
            return []

        existing = document.reference_indices(self._prefix)
        first_index = max(existing) + 1 if existing else 1
        entries = [
            f"{self._prefix}.{first_index + offset}={reference}"
            for offset, reference in enumerate(relative_paths)
        ]

        payload = "".join(f"{entry}\n" for entry in entries)
        if not document.ends_with_newline():
            payload = "\n" + payload
        try:
            with config_path.open("a", encoding="utf-8", newline="") as handle:
                handle.write(payload)
        except OSError as exc:
            raise ConfigWriteError(config_path, exc) from exc

        self._console.info(f"Added references to {config_path}: {', '.join(entries)}")
        return entries


__all__ = [
    "DEFAULT_REFERENCE_PREFIX",
    "PROJECT_PROPERTIES",
    "PropertiesDocument",
    "PropertyFilePatcher",
    "PropertyLine",
    "ReferenceLinker",
    "properties_path",
    "read_properties",
]
