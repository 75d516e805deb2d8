"""Placeholder resolution for library set and toolchain definitions."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping
import re


_PLACEHOLDER_PATTERN = re.compile(r"\{\{([^{}]+)\}\}")


class TemplateError(ValueError):
    """Raised when a placeholder cannot be resolved."""


@dataclass
class TemplateResolver:
    """Resolves ``{{dotted.path}}`` placeholders using a nested mapping context."""

    context: Mapping[str, Any]
    _cache: dict[str, Any] = field(default_factory=dict, init=False, repr=False)

    def resolve(self, value: Any) -> Any:
        if isinstance(value, str):
            return self._substitute(value)
        if isinstance(value, list):
            return [self.resolve(item) for item in value]
        if isinstance(value, tuple):
            return tuple(self.resolve(item) for item in value)
        if isinstance(value, dict):
            return {key: self.resolve(val) for key, val in value.items()}
        return value

    def _substitute(self, text: str) -> str:
        def replacement(match: re.Match[str]) -> str:
            return str(self._resolve_path(match.group(1).strip()))

        if not _PLACEHOLDER_PATTERN.search(text):
            return text
        return _PLACEHOLDER_PATTERN.sub(replacement, text)

    def _resolve_path(self, path: str) -> Any:
        if path in self._cache:
            return self._cache[path]
        current: Any = self.context
        for part in path.split("."):
            if isinstance(current, Mapping) and part in current:
                current = current[part]
                continue
            raise TemplateError(f"Cannot resolve path '{path}' in template context")
        if isinstance(current, (Mapping, list, tuple)):
            raise TemplateError(f"Path '{path}' does not name a scalar value")
        self._cache[path] = current
        return current


__all__ = ["TemplateError", "TemplateResolver"]
