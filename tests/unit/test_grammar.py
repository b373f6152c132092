"""Tests for whole-file grammar parsing."""

from pathlib import Path

import pytest

from rulegrammar.core.errors import GrammarSyntaxError, ParseLogicError
from rulegrammar.core.grammar import load_grammar, parse_grammar, parse_grammar_file
from rulegrammar.core.location import Position
from rulegrammar.core.rule import Rule
from rulegrammar.core.term import Term, TermKind


def located(result) -> list[tuple[str, int, int]]:
    return [(d.message, d.line, d.column) for d in result.diagnostics]


class TestParseGrammar:
    """Driving the rule parser over a whole source."""

    def test_multiple_declarations(self) -> None:
        result = parse_grammar("a: x\nb...\n    c: y\n    d: z\ne: 'q'\n")
        assert result.ok
        assert [rule.name for rule in result.rules] == ["a", "b", "e"]
        assert [child.name for child in result.rules[1].children] == ["c", "d"]

    @pytest.mark.parametrize("text", ["", "\n\n", "# only a comment\n", "   \n# x\n"])
    def test_empty_sources(self, text: str) -> None:
        result = parse_grammar(text)
        assert result.ok
        assert result.rules == []

    def test_missing_final_newline(self) -> None:
        result = parse_grammar("a...\n    b: c")
        assert result.ok
        assert result.rules[0].children[0].name == "b"

    def test_resynchronises_after_each_failure(self) -> None:
        text = 'foo: (\n    bar\nbaz: "q"\nqux = 1\nok: z\n'
        result = parse_grammar(text)
        assert [rule.name for rule in result.rules] == ["baz", "ok"]
        assert located(result) == [
            ("expected ')'", 2, 8),
            ("expected ':' or '...'", 4, 5),
        ]

    def test_failed_group_reports_each_child_once(self) -> None:
        text = "group...\n    a: (\n    b: ok\n    c: 'x\nafter: y\n"
        result = parse_grammar(text)
        assert [rule.name for rule in result.rules] == ["after"]
        assert [message for message, _, _ in located(result)] == [
            "expected term",
            "unterminated string literal",
        ]

    @pytest.mark.parametrize("text", ["Foo: a\nbar: b\n", "1x: a\nbar: b\n", ": a\nbar: b\n"])
    def test_line_without_rule_name(self, text: str) -> None:
        result = parse_grammar(text)
        assert located(result) == [("expected rule name", 1, 1)]
        assert [rule.name for rule in result.rules] == ["bar"]

    def test_invalid_top_level_indentation(self) -> None:
        result = parse_grammar("  foo: a\nbar: b\n")
        assert located(result) == [("invalid indentation level", 1, 3)]
        assert [rule.name for rule in result.rules] == ["bar"]

    def test_indented_top_level_rule(self) -> None:
        result = parse_grammar("    foo: a\n        more\nbar: b\n")
        assert located(result) == [("unexpected indentation increase", 1, 5)]
        assert [rule.name for rule in result.rules] == ["bar"]

    def test_max_depth_is_passed_through(self) -> None:
        result = parse_grammar("a...\n    b...\n        c: x\n", max_depth=1)
        assert [message for message, _, _ in located(result)] == [
            "maximum nesting depth of 1 exceeded"
        ]
        assert result.rules == []

    def test_incomplete_rule_parse_is_internal_fault(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fake_parse(cls, buffer, diagnostics, depth=0, *, max_depth=0):
            term = Term(kind=TermKind.ANY, position=Position())
            return Rule(name="stuck", position=buffer.position, terminal=True, value=term)

        monkeypatch.setattr(Rule, "parse", classmethod(fake_parse))
        with pytest.raises(ParseLogicError, match="incomplete rule parse"):
            parse_grammar("stuck: .\n")


class TestParseResult:
    """Lookup and formatting helpers on results."""

    def test_rule_lookup_by_qualified_name(self) -> None:
        result = parse_grammar("number...\n    digits...\n        one: [0-9]\nws: ' '\n")
        one = result.rule("number.digits.one")
        assert one is not None
        assert one.scope == ["number", "digits"]
        assert result.rule("ws") is result.rules[1]
        assert result.rule("one") is None

    def test_format_diagnostics(self) -> None:
        result = parse_grammar("foo = a\n", Path("g.grammar"))
        assert result.format_diagnostics() == ["g.grammar:1:5: error: expected ':' or '...'"]

    def test_format_diagnostics_with_snippets(self) -> None:
        result = parse_grammar("foo = a\n", Path("g.grammar"))
        assert result.format_diagnostics(with_snippets=True) == [
            "g.grammar:1:5: error: expected ':' or '...'\n"
            "   1 | foo = a\n"
            "           ^^^"
        ]

    def test_format_diagnostics_without_file(self) -> None:
        result = parse_grammar("foo = a\n")
        assert result.format_diagnostics() == ["1:5: error: expected ':' or '...'"]


class TestFileLoading:
    """Reading grammar sources from disk."""

    def test_parse_grammar_file(self, write_grammar) -> None:
        path = write_grammar("a: b\n")
        result = parse_grammar_file(path)
        assert result.ok
        assert result.file == path

    def test_load_grammar_returns_rules(self, write_grammar) -> None:
        path = write_grammar("a...\n    b: c\n")
        rules = load_grammar(path)
        assert [rule.qualified_name for rule in rules[0].walk()] == ["a", "a.b"]

    def test_load_grammar_raises_with_all_diagnostics(self, write_grammar) -> None:
        path = write_grammar("a = b\nc: (\n", "bad.grammar")
        with pytest.raises(GrammarSyntaxError) as exc_info:
            load_grammar(path)

        error = exc_info.value
        assert error.file == path
        assert [d.message for d in error.diagnostics] == ["expected ':' or '...'", "expected term"]
        assert error.message == f"2 syntax errors in {path}"
        assert str(error).startswith(f"{path}:1:3\n")
