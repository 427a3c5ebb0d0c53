"""
File-backed configuration source.

Layout::

    <config>/menu.yaml         menus: {name: {...}}, or the bare mapping
    <config>/prompt.yaml       prompts: {name: {...}}
    <themes>/<id>/theme.yaml   info: {...}, customization: {...}

YAML (``.yaml``/``.yml``) and JSON (``.json``) files are accepted.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from bbs_theme_engine.config import EngineConfig
from bbs_theme_engine.errors import DefinitionNotFoundError
from bbs_theme_engine.loaders.base import ConfigSource
from bbs_theme_engine.logging import get_logger

logger = get_logger("loaders")

THEME_FILE_NAMES = ("theme.yaml", "theme.yml", "theme.json")


def read_tree(path: Path) -> dict[str, Any]:
    """
    Read a YAML or JSON file into a dictionary.

    Raises:
        DefinitionNotFoundError: If the file is missing, unreadable, not
            parseable, or does not hold a mapping at the top level
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DefinitionNotFoundError(path, e.strerror or str(e)) from e

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise DefinitionNotFoundError(path, f"parse error: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise DefinitionNotFoundError(path, "top level is not a mapping")
    return data


class FileConfigSource(ConfigSource):
    """Reads base trees and theme definitions from the paths in an EngineConfig."""

    def __init__(self, config: EngineConfig) -> None:
        self.config = config

    def load_menus(self) -> dict[str, Any]:
        data = read_tree(self.config.menu_path)
        # menu files may wrap their entries in a top-level "menus" key
        menus = data.get("menus", data)
        return menus if isinstance(menus, dict) else {}

    def load_prompts(self) -> dict[str, Any]:
        data = read_tree(self.config.prompt_path)
        prompts = data.get("prompts")
        return prompts if isinstance(prompts, dict) else {}

    def load_theme_definition(self, theme_id: str) -> tuple[dict[str, Any], Path]:
        path = self.definition_path(theme_id)
        return read_tree(path), path

    def list_theme_ids(self) -> list[str]:
        themes_dir = self.config.paths.themes
        if not themes_dir.is_dir():
            logger.warning("Themes directory does not exist: %s", themes_dir)
            return []
        return sorted(entry.name for entry in themes_dir.iterdir() if entry.is_dir())

    def definition_path(self, theme_id: str) -> Path:
        theme_dir = self.config.theme_dir(theme_id)
        for name in THEME_FILE_NAMES:
            candidate = theme_dir / name
            if candidate.is_file():
                return candidate
        return theme_dir / THEME_FILE_NAMES[0]

    def base_paths(self) -> list[Path]:
        return [self.config.menu_path, self.config.prompt_path]
