"""Tests for rule tree dumps."""

from rulegrammar.core.grammar import parse_grammar
from rulegrammar.core.printer import format_grammar, format_rule

GRAMMAR = """\
number...
    sign: "+" | "-"
    digits...
        digit: [0-9]
        many: digit+
    value: sign? digits.many
ws: " "*
"""


class TestFormatRule:
    """Layout of single rule dumps."""

    def test_terminal_rule(self) -> None:
        result = parse_grammar("foo: a  b\n")
        assert format_rule(result.rules[0]) == "foo: a b"
        assert str(result.rules[0]) == "foo: a b"

    def test_name_extended_rule(self) -> None:
        result = parse_grammar("foo...\n    bar: a\n    baz: b\n")
        assert format_rule(result.rules[0]) == "foo...\n    bar: a\n    baz: b\n"

    def test_nested_rule_is_indented_by_scope(self) -> None:
        result = parse_grammar(GRAMMAR)
        number = result.rules[0]
        assert format_rule(number) == (
            "number...\n"
            '    sign: "+" | "-"\n'
            "    digits...\n"
            "        digit: [0-9]\n"
            "        many: digit+\n"
            "    value: sign? digits.many\n"
        )

    def test_child_dump_uses_own_scope(self) -> None:
        result = parse_grammar(GRAMMAR)
        digit = result.rule("number.digits.digit")
        assert digit is not None
        assert format_rule(digit) == "        digit: [0-9]"


class TestFormatGrammar:
    """Whole-grammar dumps re-parse to the same tree."""

    def test_dump_matches_canonical_source(self) -> None:
        result = parse_grammar(GRAMMAR)
        assert format_grammar(result.rules) == GRAMMAR

    def test_dump_reparses_to_equivalent_tree(self) -> None:
        source = "expr...\n    sum: product ('+' product)*\n    product:\n        | atom\n        | atom '*' product\natom: [a-z]+ | '(' expr.sum ')'\n"
        first = parse_grammar(source)
        assert first.ok

        second = parse_grammar(format_grammar(first.rules))
        assert second.ok

        def shape(rules):
            return [
                (rule.qualified_name, rule.terminal, rule.scope, str(rule.term) if rule.term is not None else None)
                for top in rules
                for rule in top.walk()
            ]

        assert shape(second.rules) == shape(first.rules)

    def test_empty_grammar(self) -> None:
        assert format_grammar([]) == ""
