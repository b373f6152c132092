"""Source positions and diagnostic records.

Positions are snapshots of the text buffer cursor; diagnostics pair a
message with the position where the problem was found.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict


class Position(BaseModel):
    """Cursor snapshot inside a grammar source.

    Attributes:
        offset: 0-indexed character offset into the source text
        line: 1-indexed line number
        column: 1-indexed column number
    """

    offset: int = 0
    line: int = 1
    column: int = 1

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


class Diagnostic(BaseModel):
    """A recoverable syntax problem found while parsing."""

    message: str
    position: Position

    model_config = ConfigDict(frozen=True)

    @property
    def line(self) -> int:
        return self.position.line

    @property
    def column(self) -> int:
        return self.position.column

    def format(self, file: Path | str | None = None, snippet: str | None = None) -> str:
        """
        Format the diagnostic as ``file:line:col: error: message``.

        When a snippet (the offending source line) is given, it is appended
        with a ``^^^`` marker under the column.
        """
        location = f"{file}:{self.position}" if file else str(self.position)
        text = f"{location}: error: {self.message}"
        if snippet is not None:
            text = "\n".join(
                [text, numbered_line(self.line, snippet), marker_line(self.line, self.column)]
            )
        return text

    def __str__(self) -> str:
        return f"{self.position}: {self.message}"


def numbered_line(number: int, text: str) -> str:
    """Source line prefixed with its right-aligned line number."""
    return f"{number:4d} | {text}"


def marker_line(number: int, column: int) -> str:
    """``^^^`` under ``column`` of a line rendered by :func:`numbered_line`."""
    return " " * (len(numbered_line(number, "")) + column - 1) + "^^^"
