"""
rulegrammar CLI.

Commands:

- check: Parse grammar files and report syntax errors
- dump: Print a parsed rule tree
"""

import sys

import typer

from rulegrammar.cli.commands import check_command, dump_command
from rulegrammar.cli.utils import get_version, version_callback

__version__ = get_version()

app = typer.Typer(
    help="""rulegrammar – indentation-structured grammar definitions

Commands:
  • check: report every syntax error in grammar files
  • dump:  print the parsed rule tree
""",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
) -> None:
    """rulegrammar CLI main callback for global options."""
    pass


app.command(name="check")(check_command)
app.command(name="dump")(dump_command)


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


__all__ = [
    "__version__",
    "app",
    "main",
    "get_version",
    "version_callback",
]


if __name__ == "__main__":
    main(sys.argv[1:])
