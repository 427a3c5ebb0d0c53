"""Theme definition loading and validation."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from bbs_theme_engine.config import DefaultsConfig
from bbs_theme_engine.errors import InvalidDefinitionError
from bbs_theme_engine.loaders.base import ConfigSource
from bbs_theme_engine.logging import get_logger
from bbs_theme_engine.theme.models import ThemeDefinition, ThemeHelpers, ThemeInfo

logger = get_logger("theme.loader")


class ThemeDefinitionLoader:
    """Loads a theme's definition from a ConfigSource and binds its helpers."""

    def __init__(self, source: ConfigSource, defaults: DefaultsConfig | None = None) -> None:
        self.source = source
        self.defaults = defaults or DefaultsConfig()

    def load(self, theme_id: str) -> ThemeDefinition:
        """
        Load and validate a theme definition.

        Raises:
            DefinitionNotFoundError: If the source cannot be read
            InvalidDefinitionError: If ``info.name``/``info.author`` are missing
        """
        raw, path = self.source.load_theme_definition(theme_id)
        definition = build_definition(theme_id, raw, self.defaults)
        definition.source_path = path
        logger.debug("Loaded definition for theme %s from %s", theme_id, path)
        return definition


def build_definition(
    theme_id: str,
    raw: Mapping[str, Any],
    defaults: DefaultsConfig,
) -> ThemeDefinition:
    """Validate a raw definition tree and wrap it as a ThemeDefinition."""
    info = raw.get("info")
    if not isinstance(info, Mapping):
        raise InvalidDefinitionError(theme_id, 'missing "info" section')
    if not isinstance(info.get("name"), str):
        raise InvalidDefinitionError(theme_id, '"info.name" must be text')
    if not isinstance(info.get("author"), str):
        raise InvalidDefinitionError(theme_id, '"info.author" must be text')

    customization = raw.get("customization")
    if not isinstance(customization, dict):
        customization = {}

    return ThemeDefinition(
        theme_id=theme_id,
        info=ThemeInfo(
            name=info["name"],
            author=info["author"],
            extra={k: v for k, v in info.items() if k not in ("name", "author")},
        ),
        customization=customization,
        helpers=ThemeHelpers(customization, defaults),
    )
