"""
Grammar commands for the rulegrammar CLI.

- check: Parse grammar files and report every syntax error
- dump: Print the parsed rule tree (grammar text, Rich tree or JSON)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from rulegrammar.core.config import CONFIG_FILENAME, GrammarConfig, load_config
from rulegrammar.core.errors import ParseLogicError, RuleGrammarError
from rulegrammar.core.fileset import discover_grammar_files
from rulegrammar.core.grammar import ParseResult, parse_grammar_file
from rulegrammar.core.printer import format_grammar
from rulegrammar.core.rule import DEFAULT_MAX_DEPTH, Rule

from .utils import (
    configure_logging,
    print_human_diagnostics,
    print_logic_error,
    print_vscode_diagnostics,
)

logger = logging.getLogger(__name__)

console = Console()

# Exit code for broken parser invariants, distinct from plain syntax errors
EXIT_INTERNAL_ERROR = 2


def _load_optional_config(config: str) -> GrammarConfig | None:
    config_path = Path(config).resolve()
    if not config_path.exists():
        return None
    return load_config(config_path)


def _rich_tree(rule: Rule, tree: Tree | None = None) -> Tree:
    if rule.terminal:
        label = Text.assemble((rule.name, "bold cyan"), ": ", str(rule.value))
    else:
        label = Text.assemble((rule.name, "bold magenta"), ("...", "bright_black"))

    node = Tree(label) if tree is None else tree.add(label)
    for child in rule.children:
        _rich_tree(child, node)
    return node


def check_command(
    files: list[Path] | None = typer.Argument(
        None, help="Grammar files to check (default: sources from rulegrammar.toml)"
    ),
    config: str = typer.Option(
        CONFIG_FILENAME, "--config", "-c", help="Path to rulegrammar.toml"
    ),
    format: str = typer.Option(
        "human", "--format", "-f", help="Output format: 'human' or 'vscode'"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log parser debug output"),
) -> None:
    """
    Parse grammar files and report every syntax error found.
    """
    configure_logging(verbose)

    try:
        grammar_config = _load_optional_config(config)
    except RuleGrammarError as e:
        if not files:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1)
        # Explicit files can still be checked with the default settings
        typer.echo(f"Warning: ignoring {config}: {e}", err=True)
        grammar_config = None

    root = grammar_config.root if grammar_config else Path.cwd()
    max_depth = grammar_config.sources.max_depth if grammar_config else DEFAULT_MAX_DEPTH

    if files:
        targets = list(files)
    elif grammar_config:
        targets = discover_grammar_files(grammar_config)
    else:
        typer.echo(f"No grammar files given and no {config} found.", err=True)
        raise typer.Exit(code=1)

    if not targets:
        typer.echo("No grammar files found.", err=True)
        raise typer.Exit(code=1)

    failed = False
    for path in targets:
        logger.debug("Checking %s", path)
        try:
            result = parse_grammar_file(path, max_depth=max_depth)
        except ParseLogicError as e:
            print_logic_error(e)
            raise typer.Exit(code=EXIT_INTERNAL_ERROR)
        except OSError as e:
            typer.echo(f"Error: cannot read {path}: {e}", err=True)
            failed = True
            continue

        if format == "vscode":
            print_vscode_diagnostics(result, root)
        else:
            print_human_diagnostics(result, root)
        failed = failed or not result.ok

    if failed:
        raise typer.Exit(code=1)


def dump_command(
    file: Path = typer.Argument(..., help="Grammar file to dump"),
    format: str = typer.Option(
        "text", "--format", "-f", help="Output format: 'text', 'tree' or 'json'"
    ),
    max_depth: int = typer.Option(
        DEFAULT_MAX_DEPTH,
        "--max-depth",
        help="Deepest rule and group nesting accepted",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log parser debug output"),
) -> None:
    """
    Print the rule tree of a grammar file.
    """
    configure_logging(verbose)

    try:
        result: ParseResult = parse_grammar_file(file, max_depth=max_depth)
    except ParseLogicError as e:
        print_logic_error(e)
        raise typer.Exit(code=EXIT_INTERNAL_ERROR)
    except OSError as e:
        typer.echo(f"Error: cannot read {file}: {e}", err=True)
        raise typer.Exit(code=1)

    if not result.ok:
        print_human_diagnostics(result, Path.cwd())
        raise typer.Exit(code=1)

    if format == "json":
        payload = [rule.model_dump(mode="json") for rule in result.rules]
        typer.echo(json.dumps(payload, indent=2))
    elif format == "tree":
        root = Tree(Text(file.name, style="bold"))
        for rule in result.rules:
            root.add(_rich_tree(rule))
        console.print(root)
    else:
        typer.echo(format_grammar(result.rules), nl=False)
