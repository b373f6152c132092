"""
rulegrammar CLI utilities.

Shared helpers for version output, logging setup and diagnostic printing.
"""

import logging
import platform
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import typer

from rulegrammar._version import get_version
from rulegrammar.core.errors import ParseLogicError
from rulegrammar.core.grammar import ParseResult

# Libraries whose versions are worth reporting alongside ours
_REPORTED_DEPENDENCIES = ("pydantic", "typer", "rich")


def _dependency_version(name: str) -> str:
    try:
        return version(name)
    except PackageNotFoundError:
        return "not installed"


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if not value:
        return

    import rulegrammar

    typer.echo(f"rulegrammar version {get_version()}")
    typer.echo("")
    typer.echo("Environment:")
    typer.echo(f"  Python:        {platform.python_implementation()} {platform.python_version()}")
    typer.echo(f"  Platform:      {platform.system()} {platform.release()}")
    typer.echo(f"  Package:       {Path(rulegrammar.__file__).parent}")
    typer.echo("")
    typer.echo("Dependencies:")
    for name in _REPORTED_DEPENDENCIES:
        typer.echo(f"  {name + ':':<14} {_dependency_version(name)}")

    raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Send library debug records to stderr when --verbose is given."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def display_path(path: Path | None, root: Path) -> str:
    if path is None:
        return "<string>"
    try:
        return str(path.resolve().relative_to(root.resolve()))
    except ValueError:
        return str(path)


def print_human_diagnostics(result: ParseResult, root: Path) -> None:
    """Print diagnostics in human-readable format, with the offending line."""
    name = display_path(result.file, root)
    if result.ok:
        typer.echo(f"OK: {name} ({len(result.rules)} rules)")
        return

    typer.echo(f"{name}: {len(result.diagnostics)} syntax error(s)\n", err=True)
    for diagnostic in result.diagnostics:
        snippet = result.buffer.line_text(diagnostic.line) if result.buffer else None
        typer.echo(f"ERROR: {diagnostic.format(name, snippet)}", err=True)


def print_vscode_diagnostics(result: ParseResult, root: Path) -> None:
    """
    Print diagnostics in VS Code format: file:line:col: severity: message
    """
    name = display_path(result.file, root)
    for diagnostic in result.diagnostics:
        typer.echo(diagnostic.format(name), err=True)


def print_logic_error(error: ParseLogicError) -> None:
    typer.echo(f"Internal parser error: {error}", err=True)
