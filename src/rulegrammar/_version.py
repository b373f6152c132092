"""Version lookup for rulegrammar."""

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

# Source checkout layout: <root>/src/rulegrammar/_version.py
_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def get_version() -> str:
    """
    Return the installed distribution version.

    A source checkout that was never installed falls back to the version
    declared in its pyproject.toml.
    """
    try:
        return version("rulegrammar")
    except PackageNotFoundError:
        pass

    if _PYPROJECT.is_file():
        with _PYPROJECT.open("rb") as f:
            project = tomllib.load(f).get("project", {})
        return str(project.get("version", "0.0.0"))
    return "0.0.0"
