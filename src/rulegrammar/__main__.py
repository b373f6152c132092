"""Allow ``python -m rulegrammar``."""

from rulegrammar.cli import main

main()
