"""
Whole-file grammar parsing.

Drives the rule parser over every top-level declaration of a source and
collects all diagnostics found in one pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .errors import GrammarSyntaxError, make_logic_error
from .location import Diagnostic
from .rule import DEFAULT_MAX_DEPTH, Rule, starts_rule
from .text_buffer import TextBuffer

logger = logging.getLogger(__name__)


@dataclass
class ParseResult:
    """
    Outcome of parsing one grammar source.

    Attributes:
        rules: Top-level rules that parsed successfully, in source order
        diagnostics: Every syntax problem found, in source order
        file: Source path, if the text came from a file
        buffer: Buffer the source was parsed from (for snippets)
    """

    rules: list[Rule] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    file: Path | None = None
    buffer: TextBuffer | None = None

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    def rule(self, qualified_name: str) -> Rule | None:
        """Look up a rule anywhere in the tree by its dotted name."""
        for top in self.rules:
            for rule in top.walk():
                if rule.qualified_name == qualified_name:
                    return rule
        return None

    def format_diagnostics(self, with_snippets: bool = False) -> list[str]:
        """Diagnostics as ``file:line:col: error: message`` strings."""
        formatted = []
        for diagnostic in self.diagnostics:
            snippet = None
            if with_snippets and self.buffer is not None:
                snippet = self.buffer.line_text(diagnostic.line)
            formatted.append(diagnostic.format(self.file, snippet))
        return formatted


def parse_grammar(
    text: str,
    file: Path | None = None,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> ParseResult:
    """
    Parse every declaration of a grammar source.

    A failed top-level declaration is skipped up to the next line that
    starts in column 1, so independent problems are each reported once.

    Args:
        text: Grammar source text
        file: Source file path (for diagnostics)
        max_depth: Deepest rule and group nesting accepted

    Returns:
        ParseResult with the parsed rules and all diagnostics

    Raises:
        ParseLogicError: If the rule parser breaks its own contract
    """
    buffer = TextBuffer(text, file)
    result = ParseResult(file=file, buffer=buffer)

    buffer.skip_whitespace()
    while not buffer.end_reached():
        line = buffer.line
        if starts_rule(buffer):
            rule = Rule.parse(buffer, result.diagnostics, max_depth=max_depth)
        else:
            result.diagnostics.append(
                Diagnostic(message="expected rule name", position=buffer.position)
            )
            rule = None

        if rule is None:
            logger.debug("Resynchronising after failed declaration at line %d", line)
            buffer.skip_block(0)
        elif not buffer.at_line_end():
            raise make_logic_error("incomplete rule parse", buffer)
        else:
            logger.debug("Parsed rule '%s' at line %d", rule.name, line)
            result.rules.append(rule)

        buffer.skip_whitespace()

    logger.debug(
        "Parsed %d rules with %d diagnostics from %s",
        len(result.rules),
        len(result.diagnostics),
        file or "<string>",
    )
    return result


def parse_grammar_file(path: Path, *, max_depth: int = DEFAULT_MAX_DEPTH) -> ParseResult:
    """Read a UTF-8 grammar file and parse it."""
    return parse_grammar(path.read_text(encoding="utf-8"), path, max_depth=max_depth)


def load_grammar(path: Path, *, max_depth: int = DEFAULT_MAX_DEPTH) -> list[Rule]:
    """
    Parse a grammar file, failing on any diagnostic.

    Raises:
        GrammarSyntaxError: If the file has syntax problems
    """
    result = parse_grammar_file(path, max_depth=max_depth)
    if not result.ok:
        count = len(result.diagnostics)
        raise GrammarSyntaxError(
            f"{count} syntax error{'s' if count != 1 else ''} in {path}",
            result.diagnostics,
            path,
        )
    return result.rules
