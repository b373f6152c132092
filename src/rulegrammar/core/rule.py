"""
Rule nodes and the indentation-sensitive rule parser.

A grammar file is a list of declarations, each either a terminal rule::

    digit: [0-9]

or a name-extended rule grouping indented child rules::

    number...
        integer: digit+
        decimal: digit+ "." digit+

Children are indented by exactly one level (4 columns) relative to their
parent. Every child records the names of its enclosing name-extended rules
in ``scope``, outermost first.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator

from pydantic import BaseModel, Field, field_validator, model_validator

from .errors import make_logic_error
from .location import Diagnostic, Position
from .printer import format_rule
from .term import DEFAULT_MAX_DEPTH, Term
from .text_buffer import INDENT_WIDTH, NAME_CHARS, TextBuffer

logger = logging.getLogger(__name__)

_NAME_PATTERN = re.compile(r"^[a-z_]+$")


def starts_rule(buffer: TextBuffer) -> bool:
    """Whether the cursor sits on a character that can begin a rule name."""
    return buffer.current_char() in NAME_CHARS


def _report(diagnostics: list[Diagnostic], message: str, position: Position) -> None:
    diagnostics.append(Diagnostic(message=message, position=position))


class Rule(BaseModel):
    """
    A node in the grammar tree.

    ``terminal`` tags the payload: terminal rules hold a single ``Term`` in
    ``value``, name-extended rules hold their non-empty list of children.

    Attributes:
        name: Rule name, made of lowercase letters and underscores
        position: Where the rule's name begins
        terminal: Payload discriminant
        value: Term (terminal) or child rules in declaration order
        scope: Enclosing name-extended rule names, outermost first
    """

    name: str
    position: Position
    terminal: bool
    value: Term | list[Rule]
    scope: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not _NAME_PATTERN.match(v):
            raise ValueError(f"Rule name '{v}' must be made of [a-z_] characters")
        return v

    @model_validator(mode="after")
    def validate_payload(self) -> Rule:
        """Keep the discriminant and the payload in agreement."""
        if self.terminal:
            if not isinstance(self.value, Term):
                raise ValueError(f"Terminal rule '{self.name}' must hold a term")
        elif not isinstance(self.value, list):
            raise ValueError(f"Name-extended rule '{self.name}' must hold child rules")
        elif not self.value:
            raise ValueError(f"Name-extended rule '{self.name}' has no children")
        return self

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def term(self) -> Term | None:
        """The rule's term, or None for name-extended rules."""
        return self.value if isinstance(self.value, Term) else None

    @property
    def children(self) -> list[Rule]:
        """Child rules, empty for terminal rules."""
        return self.value if isinstance(self.value, list) else []

    @property
    def depth(self) -> int:
        return len(self.scope)

    @property
    def qualified_name(self) -> str:
        """Dotted path from the outermost enclosing rule, e.g. ``number.integer``."""
        return ".".join([*self.scope, self.name])

    def walk(self) -> Iterator[Rule]:
        """Iterate over this rule and its descendants, pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def add_parent_scope(self, parent: str) -> None:
        """
        Add ``parent`` to the scope of this rule and of all its descendants.

        Subtrees are accepted innermost level first, so each new ancestor is
        outside every name already recorded and goes to the front. Each
        parent calls this exactly once per accepted child; running it twice
        on the same edge would duplicate the name.
        """
        self.scope.insert(0, parent)
        for child in self.children:
            child.add_parent_scope(parent)

    def __str__(self) -> str:
        return format_rule(self)

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    @classmethod
    def parse(
        cls,
        buffer: TextBuffer,
        diagnostics: list[Diagnostic],
        depth: int = 0,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> Rule | None:
        """
        Parse one rule declaration, recursing into name-extended children.

        Args:
            buffer: Cursor positioned on the rule's line
            diagnostics: Sink for recoverable syntax problems
            depth: Number of enclosing name-extended rules
            max_depth: Deepest nesting of rules, and of groups within a term,
                accepted before giving up

        Returns:
            The fully parsed rule, or None when diagnostics were appended.
            The returned rule's scope is still extended by its ancestors.

        Raises:
            ParseLogicError: If the line has no rule name to read
        """
        position = buffer.position

        # Indentation problems are reported without recovery; nothing on the
        # line has been consumed and the caller resynchronises.
        indentation = buffer.indentation()
        if indentation % INDENT_WIDTH:
            _report(diagnostics, "invalid indentation level", buffer.position)
            return None
        if indentation != depth * INDENT_WIDTH:
            _report(diagnostics, "unexpected indentation increase", buffer.position)
            return None

        if depth > max_depth:
            _report(diagnostics, f"maximum nesting depth of {max_depth} exceeded", position)
            buffer.skip_block(depth * INDENT_WIDTH)
            return None

        chars = []
        while buffer.current_char() in NAME_CHARS:
            chars.append(buffer.advance())
        name = "".join(chars)
        if not name:
            raise make_logic_error("no rule found", buffer)

        buffer.skip_space()
        if buffer.accept(":"):
            return cls._parse_terminal(name, position, buffer, diagnostics, depth, max_depth)
        if buffer.accept("..."):
            return cls._parse_extension(name, position, buffer, diagnostics, depth, max_depth)

        _report(diagnostics, "expected ':' or '...'", buffer.position)
        buffer.skip_block(depth * INDENT_WIDTH)
        return None

    @classmethod
    def _parse_terminal(
        cls,
        name: str,
        position: Position,
        buffer: TextBuffer,
        diagnostics: list[Diagnostic],
        depth: int,
        max_depth: int,
    ) -> Rule | None:
        # A separator must follow ':'; the term may also start on the next line
        if buffer.current_char() not in (" ", "\t", "\r", "\n", "\\", None):
            _report(diagnostics, "expected space after ':'", buffer.position)
            buffer.skip_block(depth * INDENT_WIDTH)
            return None

        buffer.skip_space(allow_newline=True)
        term = Term.parse(
            buffer, diagnostics, allow_leading_newline=True, max_depth=max_depth
        )
        if term is None:
            logger.debug("Skipping block of rule '%s' after term error", name)
            buffer.skip_block(depth * INDENT_WIDTH)
            return None

        return cls(name=name, position=position, terminal=True, value=term)

    @classmethod
    def _parse_extension(
        cls,
        name: str,
        position: Position,
        buffer: TextBuffer,
        diagnostics: list[Diagnostic],
        depth: int,
        max_depth: int,
    ) -> Rule | None:
        errors_found = False

        buffer.skip_space()
        buffer.skip_comment()
        if not buffer.at_line_end():
            _report(diagnostics, "trailing characters after '...'", buffer.position)
            buffer.skip_line()
            errors_found = True

        child_indentation = (depth + 1) * INDENT_WIDTH
        children: list[Rule] = []
        while True:
            delta = buffer.indentation_delta(position.line)
            if delta <= 0:
                break
            if delta != INDENT_WIDTH:
                buffer.skip_whitespace()
                _report(diagnostics, "unexpected indentation increase", buffer.position)
                buffer.skip_block(depth * INDENT_WIDTH)
                return None
            buffer.skip_whitespace()

            if starts_rule(buffer):
                child = cls.parse(buffer, diagnostics, depth + 1, max_depth=max_depth)
            else:
                _report(diagnostics, "expected rule name", buffer.position)
                child = None

            if child is None:
                # Keep going so later siblings still get diagnosed
                logger.debug("Child of '%s' failed at line %d", name, buffer.line)
                buffer.skip_block(child_indentation)
                errors_found = True
            elif not buffer.at_line_end():
                raise make_logic_error("incomplete rule parse", buffer)
            else:
                child.add_parent_scope(name)
                children.append(child)

        if errors_found:
            return None
        if not children:
            _report(
                diagnostics,
                f"no children found for name-extended rule '{name}'",
                position,
            )
            return None

        return cls(name=name, position=position, terminal=False, value=children)
