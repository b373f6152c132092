"""
Human-readable dumps of rule trees.

The output uses the grammar source format itself, so a dumped grammar can
be parsed again.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from .text_buffer import INDENT_WIDTH

if TYPE_CHECKING:
    from .rule import Rule


def format_rule(rule: Rule) -> str:
    """
    Dump a rule and its descendants.

    Terminal rules render as ``name: term`` without a trailing newline;
    name-extended rules render as ``name...`` followed by their children,
    one per line, indented by their scope depth.
    """
    indent = " " * (INDENT_WIDTH * len(rule.scope))
    if rule.terminal:
        return f"{indent}{rule.name}: {rule.value}"

    parts = [f"{indent}{rule.name}...\n"]
    for child in rule.children:
        parts.append(format_rule(child))
        if child.terminal:
            parts.append("\n")
    return "".join(parts)


def format_grammar(rules: Iterable[Rule]) -> str:
    """Dump a whole grammar, one top-level declaration after another."""
    parts = []
    for rule in rules:
        text = format_rule(rule)
        parts.append(text + "\n" if rule.terminal else text)
    return "".join(parts)
