"""Expose the installed project version."""

from __future__ import annotations

import re
from functools import lru_cache
from importlib import metadata
from pathlib import Path
from typing import Final

PACKAGE_NAME: Final = "eyesoul"
PYPROJECT_PATH: Final = Path(__file__).resolve().parents[3] / "pyproject.toml"

_SECTION = re.compile(r"^\[(?P<name>[^\]]+)\]\s*$")
_VERSION = re.compile(r'^version\s*=\s*"(?P<value>[^"]*)"')


@lru_cache(maxsize=1)
def get_project_version() -> str:
    """Return the distribution version, reading ``pyproject.toml`` for source checkouts."""

    try:
        return metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        return read_pyproject_version(PYPROJECT_PATH)


def read_pyproject_version(path: Path) -> str:
    if not path.exists():  # pragma: no cover - repository invariant
        raise RuntimeError(f"Unable to locate project metadata at {path}")

    in_project = False
    for line in path.read_text(encoding="utf-8").splitlines():
        section = _SECTION.match(line.strip())
        if section:
            in_project = section.group("name") == "project"
            continue
        if in_project:
            match = _VERSION.match(line.strip())
            if match and match.group("value"):
                return match.group("value")

    raise RuntimeError(f"No [project] version declared in {path}")


__all__ = ["get_project_version", "read_pyproject_version"]
