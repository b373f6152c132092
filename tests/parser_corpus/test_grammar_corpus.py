"""
Grammar corpus tests.

Valid files must parse cleanly and dump to the canonical text checked in
beside them; invalid files must produce exactly the diagnostics their
headers declare.
"""

from pathlib import Path

import pytest

from rulegrammar.core.grammar import parse_grammar
from rulegrammar.core.printer import format_grammar

from .harness import (
    GRAMMAR_CORPUS_DIR,
    expected_diagnostics,
    expected_dump,
    parse_corpus_file,
)


def get_valid_files() -> list[Path]:
    """Get all valid grammar corpus files."""
    valid_dir = GRAMMAR_CORPUS_DIR / "valid"
    if not valid_dir.exists():
        return []
    return sorted(valid_dir.glob("*.grammar"))


def get_invalid_files() -> list[Path]:
    """Get all invalid grammar corpus files."""
    invalid_dir = GRAMMAR_CORPUS_DIR / "invalid"
    if not invalid_dir.exists():
        return []
    return sorted(invalid_dir.glob("*.grammar"))


class TestValidGrammars:
    """Tests for valid grammar corpus files."""

    @pytest.mark.corpus
    @pytest.mark.parametrize("grammar_file", get_valid_files(), ids=lambda p: p.stem)
    def test_valid_grammar_parses_without_errors(self, grammar_file: Path):
        """Valid files must parse without errors."""
        result = parse_corpus_file(grammar_file)
        assert result["diagnostics"] == [], (
            f"Expected no diagnostics for valid file {grammar_file.name}, "
            f"got: {result['diagnostics']}"
        )
        assert result["rules"], f"Expected rules for {grammar_file.name}"

    @pytest.mark.corpus
    @pytest.mark.parametrize("grammar_file", get_valid_files(), ids=lambda p: p.stem)
    def test_dump_reparses_to_same_tree(self, grammar_file: Path):
        """The canonical dump of a valid file describes the same rule tree."""
        result = parse_corpus_file(grammar_file)
        reparsed = parse_grammar(result["dump"])
        assert reparsed.ok
        assert format_grammar(reparsed.rules) == result["dump"]

    @pytest.mark.corpus
    @pytest.mark.parametrize("grammar_file", get_valid_files(), ids=lambda p: p.stem)
    def test_dump_matches_expected(self, grammar_file: Path):
        """The canonical dump must match the checked-in expected dump."""
        expected = expected_dump(grammar_file)
        assert expected is not None, f"{grammar_file.name} has no .expected dump"
        assert parse_corpus_file(grammar_file)["dump"] == expected

    @pytest.mark.corpus
    @pytest.mark.parametrize("grammar_file", get_valid_files(), ids=lambda p: p.stem)
    def test_scope_follows_nesting(self, grammar_file: Path):
        """Every rule's scope lists its enclosing rules, outermost first."""
        result = parse_grammar(grammar_file.read_text(encoding="utf-8"), grammar_file)

        def check(rule, enclosing: list[str]) -> None:
            assert rule.scope == enclosing, rule.qualified_name
            for child in rule.children:
                check(child, [*enclosing, rule.name])

        for rule in result.rules:
            check(rule, [])


class TestInvalidGrammars:
    """Tests for invalid grammar corpus files."""

    @pytest.mark.corpus
    @pytest.mark.parametrize("grammar_file", get_invalid_files(), ids=lambda p: p.stem)
    def test_invalid_grammar_diagnostics(self, grammar_file: Path):
        """Invalid files must produce exactly the declared diagnostics, in order."""
        expected = expected_diagnostics(grammar_file)
        assert expected, f"{grammar_file.name} declares no expected diagnostics"

        result = parse_corpus_file(grammar_file)
        assert result["diagnostics"] == expected
        assert result["dump"] is None


class TestCorpusDeterminism:
    """Tests for parsing determinism."""

    @pytest.mark.corpus
    @pytest.mark.parametrize(
        "grammar_file", get_valid_files() + get_invalid_files(), ids=lambda p: p.stem
    )
    def test_parsing_is_deterministic(self, grammar_file: Path):
        """Parsing the same file twice must produce identical results."""
        result1 = parse_corpus_file(grammar_file)
        result2 = parse_corpus_file(grammar_file)
        assert result1 == result2, f"Non-deterministic parsing for {grammar_file.name}"


@pytest.mark.corpus
def test_corpus_is_populated(grammar_corpus_dir: Path):
    """Both halves of the corpus must contain grammar files."""
    assert sorted((grammar_corpus_dir / "valid").glob("*.grammar"))
    assert sorted((grammar_corpus_dir / "invalid").glob("*.grammar"))
