"""
rulegrammar - indentation-structured grammar definitions.

Parses grammar files made of terminal rules (``name: term``) and
name-extended rule groups (``name...`` with indented children) into a
rule tree, reporting every syntax problem found in a single pass.
"""

from __future__ import annotations

from ._version import get_version
from .core.errors import ConfigError, GrammarSyntaxError, ParseLogicError, RuleGrammarError
from .core.grammar import ParseResult, load_grammar, parse_grammar, parse_grammar_file
from .core.location import Diagnostic, Position
from .core.printer import format_grammar, format_rule
from .core.rule import Rule
from .core.term import Term, TermKind

__version__ = get_version()

__all__ = [
    "__version__",
    "ConfigError",
    "Diagnostic",
    "GrammarSyntaxError",
    "ParseLogicError",
    "ParseResult",
    "Position",
    "Rule",
    "RuleGrammarError",
    "Term",
    "TermKind",
    "format_grammar",
    "format_rule",
    "load_grammar",
    "parse_grammar",
    "parse_grammar_file",
]
