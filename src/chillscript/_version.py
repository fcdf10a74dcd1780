"""Package version, from installed metadata or the source checkout."""

from __future__ import annotations

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

DISTRIBUTION = "chill-script"


def _checkout_version() -> str | None:
    pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
    try:
        document = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        return None
    project = document.get("project", {})
    if project.get("name") != DISTRIBUTION:
        return None
    return project.get("version")


def get_version() -> str:
    """Installed distribution version; a source checkout's pyproject otherwise."""
    try:
        return version(DISTRIBUTION)
    except PackageNotFoundError:
        return _checkout_version() or "0.0.0"


__version__ = get_version()
