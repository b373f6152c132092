"""Pytest configuration for parser corpus tests."""

from pathlib import Path

import pytest

from .harness import GRAMMAR_CORPUS_DIR


@pytest.fixture
def grammar_corpus_dir() -> Path:
    """Return path to the grammar corpus directory."""
    return GRAMMAR_CORPUS_DIR
