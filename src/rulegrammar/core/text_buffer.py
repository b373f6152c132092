"""
Character cursor over grammar source text.

Tracks line/column positions while the rule and term parsers consume the
text, and answers the indentation questions the indentation-structured
grammar format depends on (current line width, width of the next content
line, skipping an indented block for error recovery).
"""

from __future__ import annotations

from pathlib import Path

from .location import Position

# Width of one nesting level in a grammar file
INDENT_WIDTH = 4

# Tabs count as one full indentation level
TAB_WIDTH = 4

# Characters allowed in rule names (and term references)
NAME_CHARS = frozenset("abcdefghijklmnopqrstuvwxyz_")


class TextBuffer:
    """
    Cursor over an in-memory grammar source.

    Lines and columns are 1-indexed. A newline character belongs to the line
    it terminates, so a cursor resting on ``\\n`` is still "on" that line.
    """

    def __init__(self, text: str, file: Path | None = None):
        """
        Initialize buffer.

        Args:
            text: Source text to walk
            file: Source file path (for error reporting)
        """
        self.text = text
        self.file = file
        self.pos = 0
        self.line = 1
        self.column = 1
        self._line_starts = [0]
        for index, char in enumerate(text):
            if char == "\n":
                self._line_starts.append(index + 1)

    @property
    def position(self) -> Position:
        """Snapshot of the cursor."""
        return Position(offset=self.pos, line=self.line, column=self.column)

    @position.setter
    def position(self, position: Position) -> None:
        self.pos = position.offset
        self.line = position.line
        self.column = position.column

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    # ------------------------------------------------------------------
    # Character access
    # ------------------------------------------------------------------

    def end_reached(self) -> bool:
        return self.pos >= len(self.text)

    def current_char(self) -> str | None:
        """Get current character or None if at end."""
        if self.pos >= len(self.text):
            return None
        return self.text[self.pos]

    def peek_char(self, offset: int = 1) -> str | None:
        """Peek ahead at character."""
        pos = self.pos + offset
        if pos >= len(self.text):
            return None
        return self.text[pos]

    def at(self, literal: str) -> bool:
        """Check whether the text at the cursor starts with ``literal``."""
        return self.text.startswith(literal, self.pos)

    def at_line_end(self) -> bool:
        """True at a newline or at end of input."""
        return self.current_char() in (None, "\n")

    def advance(self) -> str | None:
        """Consume and return the current character, updating line/column."""
        char = self.current_char()
        if char is None:
            return None
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.pos += 1
        return char

    def accept(self, literal: str) -> bool:
        """Consume ``literal`` if the cursor is at it."""
        if not self.at(literal):
            return False
        for _ in literal:
            self.advance()
        return True

    # ------------------------------------------------------------------
    # Skipping
    # ------------------------------------------------------------------

    def skip_space(self, allow_newline: bool = False) -> None:
        """
        Skip spaces and tabs on the current line.

        With ``allow_newline``, backslash line continuations are skipped too,
        together with the leading whitespace of the continued line.
        """
        while True:
            char = self.current_char()
            if char in (" ", "\t", "\r"):
                self.advance()
            elif allow_newline and (self.at("\\\n") or self.at("\\\r\n")):
                self.advance()
                self.accept("\r")
                self.advance()
            else:
                return

    def skip_comment(self) -> None:
        """Skip comment (from # to end of line)."""
        if self.current_char() == "#":
            while not self.at_line_end():
                self.advance()

    def skip_whitespace(self) -> None:
        """Skip spaces, newlines and comments up to the next content character."""
        while True:
            char = self.current_char()
            if char in (" ", "\t", "\r", "\n"):
                self.advance()
            elif char == "#":
                self.skip_comment()
            else:
                return

    def skip_line(self) -> None:
        """Move to the newline ending the current line (or to end of input)."""
        while not self.at_line_end():
            self.advance()

    def skip_block(self, indentation: int | None = None) -> None:
        """
        Skip the rest of the current indented block.

        Consumes the remainder of the current line and every following line
        indented deeper than ``indentation`` (by default the current line's
        indentation). Blank and comment lines in between are skipped as well.
        The cursor is left on the newline that ends the block.
        """
        if indentation is None:
            indentation = self.indentation()
        self.skip_line()
        while True:
            line = self.next_content_line()
            if line is None or self.line_indentation(line) <= indentation:
                return
            while self.line < line:
                self.advance()
            self.skip_line()

    # ------------------------------------------------------------------
    # Lines and indentation
    # ------------------------------------------------------------------

    def line_text(self, line: int) -> str:
        """Text of a 1-indexed line, without its newline."""
        if line < 1 or line > self.line_count:
            return ""
        start = self._line_starts[line - 1]
        end = self.text.find("\n", start)
        if end == -1:
            end = len(self.text)
        return self.text[start:end].rstrip("\r")

    def line_indentation(self, line: int) -> int:
        """Leading whitespace width of a line."""
        width = 0
        for char in self.line_text(line):
            if char == " ":
                width += 1
            elif char == "\t":
                width += TAB_WIDTH
            else:
                break
        return width

    def indentation(self) -> int:
        """Leading whitespace width of the current line."""
        return self.line_indentation(self.line)

    def is_blank_line(self, line: int) -> bool:
        """Blank and comment-only lines carry no indentation information."""
        stripped = self.line_text(line).strip(" \t\r")
        return not stripped or stripped.startswith("#")

    def next_content_line(self) -> int | None:
        """First non-blank line after the current one, if any."""
        for line in range(self.line + 1, self.line_count + 1):
            if not self.is_blank_line(line):
                return line
        return None

    def indentation_delta(self, reference_line: int) -> int:
        """
        Indentation of the next content line relative to ``reference_line``.

        End of input counts as a line with no indentation, so the delta is
        never positive once the source is exhausted.
        """
        line = self.next_content_line()
        indentation = self.line_indentation(line) if line is not None else 0
        return indentation - self.line_indentation(reference_line)

    def snippet(self, line: int, context: int = 2) -> str:
        """Source lines around ``line`` (starting up to ``context`` lines before)."""
        start = max(1, line - context)
        end = min(self.line_count, line + context)
        return "\n".join(self.line_text(number) for number in range(start, end + 1))

    def __repr__(self) -> str:
        return f"TextBuffer({self.file or '<string>'}, {self.line}:{self.column})"
