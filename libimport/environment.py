"""SDK discovery and the placeholder context for library set definitions."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping
import os

from .console import Console
from .errors import MissingEnvironment

DEFAULT_SDK_VARIABLE = "ANDROID_HOME"


@dataclass(frozen=True, slots=True)
class SdkEnvironment:
    root: Path
    variable: str = DEFAULT_SDK_VARIABLE

    @classmethod
    def from_environ(
        cls,
        env: Mapping[str, str] | None = None,
        *,
        variable: str = DEFAULT_SDK_VARIABLE,
        console: Console | None = None,
    ) -> "SdkEnvironment":
        env = os.environ if env is None else env
        value = env.get(variable, "").strip()
        if not value:
            raise MissingEnvironment(variable)
        root = Path(value).expanduser()
        if console is not None:
            console.info(f"Found Android SDK at {root}")
        return cls(root=root, variable=variable)


def build_context(
    *,
    sdk: SdkEnvironment,
    target_dir: Path,
    env: Mapping[str, str] | None = None,
) -> Dict[str, Any]:
    """Variables available to ``{{...}}`` placeholders in library set definitions."""

    return {
        "sdk": {"root": sdk.root.as_posix(), "variable": sdk.variable},
        "target": {"dir": target_dir.as_posix()},
        "env": dict(os.environ if env is None else env),
    }


__all__ = ["DEFAULT_SDK_VARIABLE", "SdkEnvironment", "build_context"]
