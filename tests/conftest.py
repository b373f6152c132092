"""Shared pytest fixtures for rulegrammar tests."""

from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture
def write_grammar(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a helper that writes a grammar source into a temporary file."""

    def _write(text: str, name: str = "test.grammar") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
