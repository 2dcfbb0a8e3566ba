"""Configuration loading: .yacclint.toml discovery, inheritance and defaults."""

from __future__ import annotations

import copy
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from yacclint.formatter import FormatOptions

CONFIG_FILENAME = ".yacclint.toml"

DEFAULT_CONFIG: dict[str, Any] = {
    "rules": {},
    "formatter": {
        "indent_size": 4,
        "align_tokens": True,
        "blank_lines_around_sections": 1,
    },
    "include": ["**/*.y"],
    "exclude": ["vendor/**/*", "tmp/**/*"],
}


class ConfigError(Exception):
    """Raised when a config file cannot be read or parsed."""


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return *base* updated with *override*, merging nested tables."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


@dataclass(slots=True)
class Config:
    """Merged configuration mapping with rule and formatter accessors."""

    data: dict[str, Any] = field(default_factory=lambda: copy.deepcopy(DEFAULT_CONFIG))
    path: Path | None = None

    def rule_enabled(self, name: str) -> bool:
        setting = self.data.get("rules", {}).get(name)
        if isinstance(setting, bool):
            return setting
        if isinstance(setting, dict):
            return bool(setting.get("enabled", True))
        return True

    def rule_config(self, name: str) -> dict[str, Any]:
        setting = self.data.get("rules", {}).get(name)
        if isinstance(setting, dict):
            return dict(setting)
        return {}

    @property
    def formatter_options(self) -> FormatOptions:
        opts = self.data.get("formatter", {})
        return FormatOptions(
            indent_size=int(opts.get("indent_size", 4)),
            align_tokens=bool(opts.get("align_tokens", True)),
            blank_lines_around_sections=int(opts.get("blank_lines_around_sections", 1)),
        )

    @property
    def included_patterns(self) -> list[str]:
        return list(self.data.get("include", []))

    @property
    def excluded_patterns(self) -> list[str]:
        return list(self.data.get("exclude", []))


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"{path}: {exc.strerror}") from exc


def _load_with_parents(path: Path, seen: set[Path]) -> dict[str, Any]:
    resolved = path.resolve()
    if resolved in seen:
        raise ConfigError(f"{path}: circular inherit_from")
    seen.add(resolved)

    data = _read_toml(path)
    parent = data.pop("inherit_from", None)
    if parent is None:
        return data
    base = _load_with_parents(path.parent / str(parent), seen)
    return deep_merge(base, data)


def load_config(config_path: Path | None = None, search_dir: Path | None = None) -> Config:
    """Load configuration, falling back to defaults when no file exists.

    An explicit *config_path* must exist. Otherwise ``.yacclint.toml`` is
    looked up in *search_dir* (default: the working directory).
    """
    if config_path is None:
        candidate = (search_dir or Path(".")) / CONFIG_FILENAME
        if not candidate.is_file():
            return Config()
        config_path = candidate
    elif not config_path.is_file():
        raise ConfigError(f"{config_path}: config file not found")

    user = _load_with_parents(config_path, set())
    return Config(deep_merge(copy.deepcopy(DEFAULT_CONFIG), user), config_path)


def default_config_text() -> str:
    """Render the default config file written by ``yacclint init``."""
    from yacclint.rules import REGISTRY

    fmt = DEFAULT_CONFIG["formatter"]
    lines = [
        "# yacclint configuration",
        "# inherit_from = \"../.yacclint.toml\"",
        "",
        f"include = {_toml_list(DEFAULT_CONFIG['include'])}",
        f"exclude = {_toml_list(DEFAULT_CONFIG['exclude'])}",
        "",
        "[formatter]",
        f"indent_size = {fmt['indent_size']}",
        f"align_tokens = {'true' if fmt['align_tokens'] else 'false'}",
        f"blank_lines_around_sections = {fmt['blank_lines_around_sections']}",
    ]
    for desc in REGISTRY.all():
        lines.append("")
        lines.append(f"# {desc.description}")
        lines.append(f"[rules.{desc.name}]")
        lines.append("enabled = true")
        if desc.name == "LongRule":
            lines.append("max_alternatives = 10")
    return "\n".join(lines) + "\n"


def _toml_list(items: list[str]) -> str:
    return "[" + ", ".join(f'"{item}"' for item in items) + "]"
