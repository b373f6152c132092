"""
Term expressions: the right-hand side of terminal rules.

A term is a small PEG-style expression built from references to other
rules, string literals, character classes and the usual operators:

    choice      a | b
    sequence    a b
    postfix     a?  a*  a+
    predicates  &a  !a
    grouping    (a | b) c
    wildcard    .

Terms may continue on following lines as long as those lines are indented
deeper than the line the term started on.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .location import Diagnostic, Position
from .text_buffer import NAME_CHARS, TextBuffer


class TermKind(str, Enum):
    """Enumeration of term expression kinds."""

    CHOICE = "choice"
    SEQUENCE = "sequence"
    OPTIONAL = "optional"
    ZERO_OR_MORE = "zero_or_more"
    ONE_OR_MORE = "one_or_more"
    AND_PREDICATE = "and_predicate"
    NOT_PREDICATE = "not_predicate"
    REFERENCE = "reference"
    LITERAL = "literal"
    CHARACTER_CLASS = "character_class"
    ANY = "any"


_PREFIXES = {"&": TermKind.AND_PREDICATE, "!": TermKind.NOT_PREDICATE}
_SUFFIXES = {"?": TermKind.OPTIONAL, "*": TermKind.ZERO_OR_MORE, "+": TermKind.ONE_OR_MORE}
_PREFIX_SYMBOLS = {kind: symbol for symbol, kind in _PREFIXES.items()}
_SUFFIX_SYMBOLS = {kind: symbol for symbol, kind in _SUFFIXES.items()}

# Binding strength, used to decide where rendering needs parentheses
_PRECEDENCE = {
    TermKind.CHOICE: 0,
    TermKind.SEQUENCE: 1,
    TermKind.AND_PREDICATE: 2,
    TermKind.NOT_PREDICATE: 2,
    TermKind.OPTIONAL: 3,
    TermKind.ZERO_OR_MORE: 3,
    TermKind.ONE_OR_MORE: 3,
}

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}

# Nesting guard for rule blocks and parenthesised groups; each level costs a
# few interpreter frames
DEFAULT_MAX_DEPTH = 100

_TERM_START = NAME_CHARS | frozenset("\"'([.!&")


class Term(BaseModel):
    """
    A node of a term expression tree.

    Examples:
        - digit: Term(kind=REFERENCE, text="digit")
        - "if": Term(kind=LITERAL, text="if")
        - [0-9]: Term(kind=CHARACTER_CLASS, text="0-9")
        - a | b: Term(kind=CHOICE, children=[a, b])
        - a*: Term(kind=ZERO_OR_MORE, children=[a])
    """

    kind: TermKind
    position: Position
    text: str | None = None  # literal value, reference name or class body
    children: list[Term] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def parse(
        cls,
        buffer: TextBuffer,
        diagnostics: list[Diagnostic],
        allow_leading_newline: bool = False,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> Term | None:
        """
        Parse one term expression at the cursor.

        Returns None after appending diagnostics if the term is malformed.
        On success the cursor rests at the end of the term's last line.
        Parentheses nested deeper than ``max_depth`` are reported rather
        than parsed.
        """
        return _TermParser(buffer, diagnostics, max_depth).parse(allow_leading_newline)

    def walk(self) -> Iterator[Term]:
        """Iterate over this term and all nested terms, pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def references(self) -> list[str]:
        """Names of the rules referenced by this term, in source order."""
        return [term.text for term in self.walk() if term.kind == TermKind.REFERENCE and term.text]

    def __str__(self) -> str:
        return format_term(self)


def format_term(term: Term) -> str:
    """Render a term as canonical text that parses back to the same term."""
    return _render(term, 0)


def _render(term: Term, min_precedence: int) -> str:
    kind = term.kind
    if kind == TermKind.CHOICE:
        text = " | ".join(_render(child, 1) for child in term.children)
    elif kind == TermKind.SEQUENCE:
        text = " ".join(_render(child, 2) for child in term.children)
    elif kind in _PREFIX_SYMBOLS:
        text = _PREFIX_SYMBOLS[kind] + _render(term.children[0], 3)
    elif kind in _SUFFIX_SYMBOLS:
        text = _render(term.children[0], 4) + _SUFFIX_SYMBOLS[kind]
    elif kind == TermKind.LITERAL:
        text = _quote(term.text or "")
    elif kind == TermKind.CHARACTER_CLASS:
        text = f"[{term.text}]"
    elif kind == TermKind.ANY:
        text = "."
    else:
        text = term.text or ""

    if _PRECEDENCE.get(kind, 4) < min_precedence:
        return f"({text})"
    return text


def _quote(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
        .replace("\r", "\\r")
    )
    return f'"{escaped}"'


class _TermParser:
    """Recursive descent over a single term expression."""

    def __init__(self, buffer: TextBuffer, diagnostics: list[Diagnostic], max_depth: int):
        self.buffer = buffer
        self.diagnostics = diagnostics
        self.max_depth = max_depth
        self.group_depth = 0
        # Lines indented deeper than this one continue the term
        self.reference_line = buffer.line

    def error(self, message: str, position: Position | None = None) -> None:
        self.diagnostics.append(
            Diagnostic(message=message, position=position or self.buffer.position)
        )

    def skip_gap(self) -> None:
        """Skip spaces, comments and continuation lines between tokens."""
        buffer = self.buffer
        while True:
            buffer.skip_space(allow_newline=True)
            buffer.skip_comment()
            if buffer.current_char() == "\n" and buffer.indentation_delta(self.reference_line) > 0:
                buffer.skip_whitespace()
            else:
                return

    def parse(self, allow_leading_newline: bool) -> Term | None:
        buffer = self.buffer
        buffer.skip_space(allow_newline=True)
        buffer.skip_comment()
        if buffer.at_line_end() and not allow_leading_newline:
            self.error("expected term")
            return None

        self.skip_gap()
        # Alternatives may be written one per line, each led by '|'
        if buffer.accept("|"):
            self.skip_gap()

        term = self.parse_choice()
        if term is None:
            return None

        if not buffer.at_line_end():
            self.error(f"unexpected character '{buffer.current_char()}' in term")
            return None
        return term

    def parse_choice(self) -> Term | None:
        buffer = self.buffer
        position = buffer.position
        first = self.parse_sequence()
        if first is None:
            return None

        alternatives = [first]
        while buffer.accept("|"):
            self.skip_gap()
            alternative = self.parse_sequence()
            if alternative is None:
                return None
            alternatives.append(alternative)

        if len(alternatives) == 1:
            return first
        return Term(kind=TermKind.CHOICE, position=position, children=alternatives)

    def parse_sequence(self) -> Term | None:
        position = self.buffer.position
        items: list[Term] = []
        while self.buffer.current_char() in _TERM_START:
            item = self.parse_prefixed()
            if item is None:
                return None
            items.append(item)

        if not items:
            self.error("expected term")
            return None
        if len(items) == 1:
            return items[0]
        return Term(kind=TermKind.SEQUENCE, position=position, children=items)

    def parse_prefixed(self) -> Term | None:
        buffer = self.buffer
        position = buffer.position
        char = buffer.current_char()
        if char in _PREFIXES:
            buffer.advance()
            self.skip_gap()
            operand = self.parse_postfix()
            if operand is None:
                return None
            return Term(kind=_PREFIXES[char], position=position, children=[operand])
        return self.parse_postfix()

    def parse_postfix(self) -> Term | None:
        buffer = self.buffer
        position = buffer.position
        operand = self.parse_primary()
        if operand is None:
            return None

        char = buffer.current_char()
        if char in _SUFFIXES:
            buffer.advance()
            operand = Term(kind=_SUFFIXES[char], position=position, children=[operand])

        self.skip_gap()
        return operand

    def parse_primary(self) -> Term | None:
        buffer = self.buffer
        position = buffer.position
        char = buffer.current_char()

        if char in NAME_CHARS:
            return self.parse_reference()
        if char in ('"', "'"):
            return self.parse_literal()
        if char == "[":
            return self.parse_character_class()
        if char == ".":
            buffer.advance()
            return Term(kind=TermKind.ANY, position=position)
        if char == "(":
            if self.group_depth >= self.max_depth:
                self.error(f"maximum nesting depth of {self.max_depth} exceeded")
                return None
            buffer.advance()
            self.skip_gap()
            self.group_depth += 1
            inner = self.parse_choice()
            self.group_depth -= 1
            if inner is None:
                return None
            if not buffer.accept(")"):
                self.error("expected ')'")
                return None
            return inner

        self.error("expected term")
        return None

    def read_name(self) -> str:
        chars = []
        while self.buffer.current_char() in NAME_CHARS:
            chars.append(self.buffer.advance())
        return "".join(chars)

    def parse_reference(self) -> Term:
        buffer = self.buffer
        position = buffer.position
        parts = [self.read_name()]
        # Scoped references: outer.inner.name
        while buffer.current_char() == "." and buffer.peek_char() in NAME_CHARS:
            buffer.advance()
            parts.append(self.read_name())
        return Term(kind=TermKind.REFERENCE, position=position, text=".".join(parts))

    def parse_literal(self) -> Term | None:
        buffer = self.buffer
        position = buffer.position
        quote = buffer.advance()

        chars = []
        while True:
            char = buffer.current_char()
            if char is None or char == "\n":
                self.error("unterminated string literal", position)
                return None
            if char == quote:
                buffer.advance()
                break
            if char == "\\":
                buffer.advance()
                escaped = buffer.current_char()
                if escaped is None or escaped == "\n":
                    self.error("unterminated string literal", position)
                    return None
                chars.append(_ESCAPES.get(escaped, escaped))
                buffer.advance()
            else:
                chars.append(char)
                buffer.advance()

        if not chars:
            self.error("empty string literal", position)
            return None
        return Term(kind=TermKind.LITERAL, position=position, text="".join(chars))

    def parse_character_class(self) -> Term | None:
        buffer = self.buffer
        position = buffer.position
        buffer.advance()

        chars: list[str] = []
        while True:
            char = buffer.current_char()
            if char is None or char == "\n":
                self.error("unterminated character class", position)
                return None
            if char == "]":
                buffer.advance()
                break
            if char == "\\":
                chars.append(buffer.advance() or "")
                if buffer.at_line_end():
                    self.error("unterminated character class", position)
                    return None
            chars.append(buffer.advance() or "")

        if not chars:
            self.error("empty character class", position)
            return None
        return Term(kind=TermKind.CHARACTER_CLASS, position=position, text="".join(chars))
