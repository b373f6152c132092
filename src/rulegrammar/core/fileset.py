from pathlib import Path

from .config import GrammarConfig


def discover_grammar_files(config: GrammarConfig) -> list[Path]:
    files: list[Path] = []
    pattern = f"*{config.sources.extension}"
    for rel in config.sources.paths:
        base = (config.root / rel).resolve()
        if not base.exists():
            continue
        if base.is_file():
            files.append(base)
            continue
        for p in base.rglob(pattern):
            files.append(p)
    return sorted(set(files))
