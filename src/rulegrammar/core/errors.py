"""
Error types for grammar loading and rule parsing.

Syntax problems in a grammar file are *not* exceptions: the parser collects
them as :class:`~rulegrammar.core.location.Diagnostic` records and keeps going.
The exceptions here cover the cases that must stop the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from .location import Diagnostic, marker_line, numbered_line

if TYPE_CHECKING:
    from .text_buffer import TextBuffer


@dataclass
class ErrorContext:
    """
    Source location attached to an exception.

    Attributes:
        file: Grammar file being parsed, if any
        line: 1-indexed line of the failure
        column: 1-indexed column of the failure
        snippet: Source lines around the failure, starting at ``line - 2``
    """

    file: Path | None
    line: int
    column: int
    snippet: str | None = None

    def format(self) -> str:
        """
        Render as ``file:line:col``, followed by the numbered snippet if any.

        Example:
            rules.grammar:3:5
               1 | a: b
               2 | c...
               3 | foo = a
                       ^^^
        """
        location = f"{self.file or '<string>'}:{self.line}:{self.column}"
        if not self.snippet:
            return location

        rendered = [location]
        first = max(1, self.line - 2)
        for number, text in enumerate(self.snippet.split("\n"), start=first):
            rendered.append(numbered_line(number, text))
            if number == self.line:
                rendered.append(marker_line(number, self.column))
        return "\n".join(rendered)


class RuleGrammarError(Exception):
    """Base exception for all rulegrammar errors."""

    def __init__(self, message: str, context: ErrorContext | None = None):
        self.message = message
        self.context = context
        super().__init__(f"{context.format()}\n{message}" if context else message)


class ParseLogicError(RuleGrammarError):
    """
    Raised when the rule parser is driven in a state its contract forbids.

    Examples:
    - A rule parse started on a line with no rule-name characters
    - A successful child parse that did not stop at a line boundary

    This signals a defect in the calling code, not a malformed grammar,
    and aborts the whole parse.
    """

    pass


class GrammarSyntaxError(RuleGrammarError):
    """
    Raised by the loading helpers when a grammar file produced diagnostics.

    Carries every diagnostic found in the pass, in source order; the
    exception's own location is that of the first one.
    """

    def __init__(
        self,
        message: str,
        diagnostics: list[Diagnostic],
        file: Path | None = None,
    ):
        self.diagnostics = list(diagnostics)
        self.file = file
        context = None
        if diagnostics and file is not None:
            first = diagnostics[0]
            context = ErrorContext(file=file, line=first.line, column=first.column)
        super().__init__(message, context)


class ConfigError(RuleGrammarError):
    """Raised when a rulegrammar.toml file cannot be read or holds invalid values."""

    pass


def make_logic_error(message: str, buffer: TextBuffer) -> ParseLogicError:
    """Build a ParseLogicError located at the buffer's cursor, with a snippet."""
    position = buffer.position
    context = ErrorContext(
        file=buffer.file,
        line=position.line,
        column=position.column,
        snippet=buffer.snippet(position.line),
    )
    return ParseLogicError(message, context)
