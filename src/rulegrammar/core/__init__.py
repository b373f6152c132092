"""
Core grammar parsing: text buffer, terms, rules, printer and driver.
"""

from .errors import ConfigError, GrammarSyntaxError, ParseLogicError, RuleGrammarError
from .grammar import ParseResult, load_grammar, parse_grammar, parse_grammar_file
from .location import Diagnostic, Position
from .printer import format_grammar, format_rule
from .rule import DEFAULT_MAX_DEPTH, Rule
from .term import Term, TermKind, format_term
from .text_buffer import INDENT_WIDTH, TextBuffer

__all__ = [
    "ConfigError",
    "DEFAULT_MAX_DEPTH",
    "Diagnostic",
    "GrammarSyntaxError",
    "INDENT_WIDTH",
    "ParseLogicError",
    "ParseResult",
    "Position",
    "Rule",
    "RuleGrammarError",
    "Term",
    "TermKind",
    "TextBuffer",
    "format_grammar",
    "format_rule",
    "format_term",
    "load_grammar",
    "parse_grammar",
    "parse_grammar_file",
]
