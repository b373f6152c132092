import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import ConfigError
from .rule import DEFAULT_MAX_DEPTH

CONFIG_FILENAME = "rulegrammar.toml"


@dataclass
class SourcesConfig:
    """Where grammar files live.

    Examples in rulegrammar.toml:

        [grammar]
        paths = ["grammar/", "extra/tokens.grammar"]
        extension = ".grammar"
        max_depth = 32
    """

    paths: list[str] = field(default_factory=lambda: ["./grammar"])
    extension: str = ".grammar"
    max_depth: int = DEFAULT_MAX_DEPTH


@dataclass
class GrammarConfig:
    """
    Project configuration loaded from rulegrammar.toml.

    Paths in ``sources`` are relative to ``root``, the directory holding
    the configuration file.
    """

    name: str
    root: Path
    sources: SourcesConfig = field(default_factory=SourcesConfig)


def _expect(value: Any, kind: type, key: str, path: Path) -> Any:
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ConfigError(f"{path}: '{key}' must be of type {kind.__name__}")
    return value


def load_config(path: Path) -> GrammarConfig:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    project = data.get("project", {})
    grammar = data.get("grammar", {})

    paths = _expect(grammar.get("paths", ["./grammar"]), list, "grammar.paths", path)
    for entry in paths:
        _expect(entry, str, "grammar.paths", path)

    extension = _expect(grammar.get("extension", ".grammar"), str, "grammar.extension", path)
    if not extension.startswith("."):
        extension = f".{extension}"

    max_depth = _expect(
        grammar.get("max_depth", DEFAULT_MAX_DEPTH), int, "grammar.max_depth", path
    )
    if max_depth < 0:
        raise ConfigError(f"{path}: 'grammar.max_depth' must not be negative")

    return GrammarConfig(
        name=project.get("name", path.parent.name or "unnamed"),
        root=path.parent,
        sources=SourcesConfig(paths=paths, extension=extension, max_depth=max_depth),
    )
