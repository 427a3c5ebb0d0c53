"""
Configuration models for the theme engine.

Provides a flexible configuration system that can be loaded from
YAML/JSON files or constructed programmatically.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

CONFIG_ENV_VAR = "BBS_THEME_CONFIG"

DEFAULT_ART_TYPES: list[str] = [".ans", ".asc", ".pcb", ".bbs", ".amg", ".txt"]

# Used when neither the theme nor the system configures a style
FALLBACK_DATE_FORMAT = "MM/DD/YYYY"
FALLBACK_TIME_FORMAT = "h:mm a"
FALLBACK_DATE_TIME_FORMAT = "MM/DD/YYYY h:mm a"


def get_config_path() -> Path | None:
    """Get the config file path from the environment, if set."""
    val = os.environ.get(CONFIG_ENV_VAR)
    return Path(val).expanduser() if val else None


@dataclass
class PathsConfig:
    """Filesystem locations used by the engine."""

    root: Path = field(default_factory=lambda: Path("."))  # Base for relative art paths
    themes: Path = field(default_factory=lambda: Path("themes"))  # One directory per theme
    art: Path = field(default_factory=lambda: Path("art"))  # General, theme-less art
    config: Path = field(default_factory=lambda: Path("config"))  # menu/prompt files


@dataclass
class DefaultsConfig:
    """System defaults that themes may override."""

    theme: str = "luciano_blocktronics"
    password_char: str = "*"
    date_format: dict[str, str] = field(default_factory=lambda: {"short": FALLBACK_DATE_FORMAT})
    time_format: dict[str, str] = field(default_factory=lambda: {"short": FALLBACK_TIME_FORMAT})
    date_time_format: dict[str, str] = field(
        default_factory=lambda: {"short": FALLBACK_DATE_TIME_FORMAT}
    )


@dataclass
class ArtConfig:
    """Art lookup behaviour."""

    path_fallthrough: bool = True  # Continue searching after a path-qualified miss
    random: bool = True  # NAME1.EXT, NAME2.EXT, ... variant selection
    read_sauce: bool = True  # Parse and strip SAUCE records
    types: list[str] = field(default_factory=lambda: list(DEFAULT_ART_TYPES))


@dataclass
class EngineConfig:
    """
    Main configuration for the theme engine.

    Relative paths are taken as-is (relative to the working directory);
    ``from_yaml`` resolves them against the config file's directory.

    Example YAML:
        paths:
          root: /opt/bbs
          themes: /opt/bbs/themes
          art: /opt/bbs/art
          config: /opt/bbs/config
        menu_file: menu.yaml
        prompt_file: prompt.yaml
        defaults:
          theme: luciano_blocktronics
          password_char: "*"
          date_format:
            short: MM/DD/YYYY
        art:
          path_fallthrough: true
          random: true
        watch: true
        watch_debounce_ms: 250
    """

    paths: PathsConfig = field(default_factory=PathsConfig)
    menu_file: str = "menu.yaml"
    prompt_file: str = "prompt.yaml"
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    art: ArtConfig = field(default_factory=ArtConfig)

    # File watching
    watch: bool = False
    watch_debounce_ms: int = 250

    @classmethod
    def from_dict(cls, data: dict[str, Any], base_dir: Path | None = None) -> EngineConfig:
        """Create config from a dictionary."""

        def _path(value: Any, default: Path) -> Path:
            if value is None:
                path = default
            else:
                path = Path(str(value)).expanduser()
            if base_dir is not None and not path.is_absolute():
                path = base_dir / path
            return path

        paths_data = data.get("paths") or {}
        default_paths = PathsConfig()
        paths = PathsConfig(
            root=_path(paths_data.get("root"), default_paths.root),
            themes=_path(paths_data.get("themes"), default_paths.themes),
            art=_path(paths_data.get("art"), default_paths.art),
            config=_path(paths_data.get("config"), default_paths.config),
        )

        defaults_data = data.get("defaults") or {}
        base_defaults = DefaultsConfig()
        defaults = DefaultsConfig(
            theme=defaults_data.get("theme", base_defaults.theme),
            password_char=str(defaults_data.get("password_char", base_defaults.password_char)),
            date_format={**base_defaults.date_format, **(defaults_data.get("date_format") or {})},
            time_format={**base_defaults.time_format, **(defaults_data.get("time_format") or {})},
            date_time_format={
                **base_defaults.date_time_format,
                **(defaults_data.get("date_time_format") or {}),
            },
        )

        art_data = data.get("art") or {}
        art = ArtConfig(
            path_fallthrough=art_data.get("path_fallthrough", True),
            random=art_data.get("random", True),
            read_sauce=art_data.get("read_sauce", True),
            types=[t.lower() for t in art_data.get("types", DEFAULT_ART_TYPES)],
        )

        return cls(
            paths=paths,
            menu_file=data.get("menu_file", "menu.yaml"),
            prompt_file=data.get("prompt_file", "prompt.yaml"),
            defaults=defaults,
            art=art,
            watch=data.get("watch", False),
            watch_debounce_ms=data.get("watch_debounce_ms", 250),
        )

    @classmethod
    def from_yaml(cls, path: Path) -> EngineConfig:
        """Load config from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {}, base_dir=Path(path).parent)

    @classmethod
    def from_yaml_string(cls, content: str) -> EngineConfig:
        """Load config from a YAML string."""
        data = yaml.safe_load(content)
        return cls.from_dict(data or {})

    def to_dict(self) -> dict[str, Any]:
        """Convert config to a dictionary."""
        return {
            "paths": {
                "root": str(self.paths.root),
                "themes": str(self.paths.themes),
                "art": str(self.paths.art),
                "config": str(self.paths.config),
            },
            "menu_file": self.menu_file,
            "prompt_file": self.prompt_file,
            "defaults": {
                "theme": self.defaults.theme,
                "password_char": self.defaults.password_char,
                "date_format": dict(self.defaults.date_format),
                "time_format": dict(self.defaults.time_format),
                "date_time_format": dict(self.defaults.date_time_format),
            },
            "art": {
                "path_fallthrough": self.art.path_fallthrough,
                "random": self.art.random,
                "read_sauce": self.art.read_sauce,
                "types": list(self.art.types),
            },
            "watch": self.watch,
            "watch_debounce_ms": self.watch_debounce_ms,
        }

    @property
    def menu_path(self) -> Path:
        """Full path of the base menu definitions."""
        return self._config_file(self.menu_file)

    @property
    def prompt_path(self) -> Path:
        """Full path of the base prompt definitions."""
        return self._config_file(self.prompt_file)

    def theme_dir(self, theme_id: str) -> Path:
        """Directory holding a theme's definition and art."""
        return self.paths.themes / theme_id

    def _config_file(self, name: str) -> Path:
        path = Path(name).expanduser()
        if path.is_absolute():
            return path
        return self.paths.config / path
